"""
Follow-Up Health Backend Package.

FastAPI service layer for the Follow-Up Health Dashboard: a lead-generation
calculator that grades a clinic's inquiry follow-up, estimates monthly revenue
at risk and emails a report, plus the admin console API behind it.

Subpackages:
    - api: FastAPI route handlers
    - core: Configuration, database, and dependencies
    - models: Pydantic schemas and enums
    - services: Scoring, drivers, email composition, mail transport, auth
    - jobs: Admin seeding and the daily Slack lead digest
    - sql: Schema and parameterized SQL queries
"""

__version__ = "1.0.0"
