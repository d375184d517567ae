"""
Test package for the Follow-Up Health backend.

Test modules:
- test_scoring.py: Loss rate, revenue at risk, grade ladder, severity, component scores
- test_drivers.py: Leakage driver selection and copy tables
- test_email_composer.py: Placeholder merge, link handling and HTML assembly
- test_auth.py: Password hashing, session tokens and the login endpoints
- test_api.py: Calculator, submit, submissions and email template endpoints
- test_jobs.py: Mail transport, Slack lead digest and admin seeding

Fixtures live in conftest.py and are discovered automatically by pytest.
"""

__all__: list = []
