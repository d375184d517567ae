"""
Email template SQL query module for the Follow-Up Health backend.

One row per grade range (A, BC, DF), enforced by the UNIQUE constraint on
email_templates.grade_range, which is also the upsert conflict target.
"""


TEMPLATE_COLUMNS = "id::text AS id, grade_range, subject, body, config, updated_at"

SELECT_ALL_TEMPLATES = f"""
SELECT {TEMPLATE_COLUMNS}
FROM email_templates
ORDER BY grade_range
"""

# Used by the submit flow; config is parsed leniently by the composer
SELECT_TEMPLATE_BY_GRADE_RANGE = """
SELECT subject, body, config
FROM email_templates
WHERE grade_range = $1
"""

# $1 grade_range, $2 subject, $3 body, $4 config
UPSERT_TEMPLATE = f"""
INSERT INTO email_templates (grade_range, subject, body, config, updated_at)
VALUES ($1, $2, $3, $4, NOW())
ON CONFLICT (grade_range)
DO UPDATE SET subject = $2, body = $3, config = $4, updated_at = NOW()
RETURNING {TEMPLATE_COLUMNS}
"""
