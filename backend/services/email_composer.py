"""
Email Composer Service

Builds the HTML report email a visitor receives after submitting the calculator.
Admin staff edit one template per grade range (A, BC, DF); this module merges a
template with a visitor's results and produces a complete, email-client-safe
HTML document.

Composition Pipeline (build_email_html):
1. Placeholder merge: one regex pass over the closed token set
   {{grade}}, {{risk_low}}, {{risk_high}}, {{dropoff_percent}} and, when a CTA
   URL is configured, {{cta_url}}. Substituted values are never re-scanned and
   unknown tokens are left verbatim.
2. Format detection: content containing a tag is treated as HTML and kept
   as-is. Plain text gets bare URLs turned into anchors and newlines into <br>.
3. Link hardening: every <a> tag gets an absolute https href (when it had no
   scheme), a default inline style, target="_blank" and
   rel="noopener noreferrer". Attributes the author already set are kept.
4. Wrapping: non-blank content goes into one styled block inside a fixed
   document shell that ends with a single footer line.

Usage:
    from backend.services.email_composer import compose_report_email

    email = compose_report_email(results, template_row, settings.app_url)
    send_email(to=address, subject=email.subject, html=email.html)

Nothing here performs I/O. A malformed template config is logged at warning
level and treated as empty; no composer function raises on template content.
"""

import json
import logging
import re
from typing import Any, Mapping, Optional

from pydantic import ValidationError

from backend.models.schemas import (
    CalculationResults,
    ComposedEmail,
    EmailPlaceholders,
    TemplateConfig,
)


logger = logging.getLogger(__name__)


# =============================================================================
# Constants
# =============================================================================

DEFAULT_SUBJECT = "Your Follow-Up Health Score: {grade}"

FOOTER_TEXT = "This snapshot was generated by the Follow-Up Health Dashboard."

LINK_STYLE = "color: #0D9488; text-decoration: underline;"

CONTENT_BLOCK_STYLE = (
    "background-color: #F8FAFC; border-radius: 8px; padding: 24px; "
    "margin-bottom: 24px; color: #1E3A5F; line-height: 1.6;"
)

BODY_STYLE = (
    "font-family: 'Inter', Arial, sans-serif; line-height: 1.6; color: #1E3A5F; "
    "max-width: 600px; margin: 0 auto; padding: 20px;"
)

FOOTER_STYLE = (
    "margin-top: 32px; padding-top: 16px; border-top: 1px solid #E2E8F0; "
    "text-align: center; color: #64748B; font-size: 12px;"
)

DOCUMENT_TEMPLATE = """<!DOCTYPE html>
<html>
<head>
  <meta charset="utf-8">
  <meta name="viewport" content="width=device-width, initial-scale=1.0">
</head>
<body style="{body_style}">
{main}
  <div style="{footer_style}">
    <p>{footer}</p>
  </div>
</body>
</html>
"""


# =============================================================================
# Regular Expressions
# =============================================================================

PLACEHOLDER_RE = re.compile(r"\{\{(grade|risk_low|risk_high|dropoff_percent|cta_url)\}\}")

# Any opening tag-like sequence marks the content as HTML
HTML_RE = re.compile(r"<[a-z][\s\S]*>", re.IGNORECASE)

BARE_URL_RE = re.compile(r"(?:https?://|www\.)[^\s<>\"']+", re.IGNORECASE)

# Punctuation that usually ends a sentence rather than a URL
URL_TRAILING_PUNCTUATION = ".,;:!?)]}'\""

ANCHOR_TAG_RE = re.compile(r"<a\b[^>]*>", re.IGNORECASE)

HREF_RE = re.compile(
    r"""(\shref\s*=\s*)(?:"([^"]*)"|'([^']*)'|([^\s"'>]+))""",
    re.IGNORECASE,
)

# scheme:// of any kind, or an opaque scheme such as sms: or geo:. A host
# followed by a numeric port (localhost:3000) is not a scheme.
SCHEME_RE = re.compile(
    r"^(?:[a-z][a-z0-9+.\-]*://|[a-z][a-z0-9+\-]*:(?!\d+(?:[/?#]|$)))",
    re.IGNORECASE,
)

OPAQUE_LINK_PREFIXES = ("mailto:", "tel:", "sms:")

QUOTED_VALUE_RE = re.compile(r"""(?:"[^"]*"|'[^']*')""")


def _has_attribute(tag: str, name: str) -> bool:
    # Attribute names only; quoted values may contain "rel=" and the like
    names_only = QUOTED_VALUE_RE.sub('""', tag)
    return re.search(rf"\s{name}\s*=", names_only, re.IGNORECASE) is not None


# =============================================================================
# Template Config
# =============================================================================


def parse_template_config(raw: Optional[str]) -> TemplateConfig:
    """
    Parse the optional JSON config stored with a template.

    Args:
        raw: Raw JSON text from email_templates.config (may be None or blank)

    Returns:
        TemplateConfig; empty when the config is missing, malformed, not a
        JSON object, or has fields of the wrong type.
    """
    if raw is None or not raw.strip():
        return TemplateConfig()

    try:
        data = json.loads(raw)
    except ValueError as e:
        logger.warning(f"Ignoring malformed email template config: {e}")
        return TemplateConfig()

    if not isinstance(data, dict):
        logger.warning(
            f"Ignoring email template config that is not a JSON object "
            f"(got {type(data).__name__})"
        )
        return TemplateConfig()

    try:
        return TemplateConfig.model_validate(data)
    except ValidationError as e:
        logger.warning(f"Ignoring invalid email template config: {e.error_count()} error(s)")
        return TemplateConfig()


def resolve_cta_url(config: TemplateConfig, default_url: Optional[str] = None) -> Optional[str]:
    """Pick the template's CTA URL, falling back to the app URL."""
    if config.cta_url and config.cta_url.strip():
        return config.cta_url.strip()
    if default_url and default_url.strip():
        return default_url.strip()
    return None


# =============================================================================
# Placeholders
# =============================================================================


def build_placeholders(
    results: CalculationResults,
    cta_url: Optional[str] = None,
) -> EmailPlaceholders:
    """
    Format results for template substitution.

    Dollar figures get thousands separators (2310 -> "2,310"); the drop-off
    percentage is a bare integer string.
    """
    return EmailPlaceholders(
        grade=results.grade,
        risk_low=f"{results.revenueAtRisk.low:,}",
        risk_high=f"{results.revenueAtRisk.high:,}",
        dropoff_percent=str(results.dropoffPercent),
        cta_url=cta_url,
    )


def replace_placeholders(text: str, placeholders: EmailPlaceholders) -> str:
    """
    Substitute known tokens in a single pass.

    {{cta_url}} is only substituted when the placeholders carry a URL.
    """
    values = placeholders.model_dump(exclude_none=True)

    def _substitute(match: "re.Match[str]") -> str:
        return values.get(match.group(1), match.group(0))

    return PLACEHOLDER_RE.sub(_substitute, text)


# =============================================================================
# Content Formatting
# =============================================================================


def is_html(content: str) -> bool:
    """True when the content contains at least one tag."""
    return HTML_RE.search(content) is not None


def linkify(text: str) -> str:
    """Wrap bare http(s):// and www. URLs in plain text with anchor tags."""

    def _anchor(match: "re.Match[str]") -> str:
        url = match.group(0)
        trailing = ""
        while url and url[-1] in URL_TRAILING_PUNCTUATION:
            trailing = url[-1] + trailing
            url = url[:-1]
        if not url or url.lower() in ("http://", "https://", "www."):
            return match.group(0)
        return f'<a href="{url}">{url}</a>{trailing}'

    return BARE_URL_RE.sub(_anchor, text)


def normalize_href(href: str) -> str:
    """
    Make an href absolute for email clients.

    Scheme-less hosts get https://, protocol-relative //host gets https:.
    Hrefs that already carry a scheme (mailto:, tel:, sms: included),
    fragment-only, root-relative, empty hrefs and hrefs still holding an
    unresolved {{token}} are returned unchanged.
    """
    value = href.strip()
    if not value or value.startswith("#") or "{{" in value:
        return href
    if value.lower().startswith(OPAQUE_LINK_PREFIXES):
        return href
    if SCHEME_RE.match(value):
        return href
    if value.startswith("//"):
        return f"https:{value}"
    if value.startswith("/"):
        return href
    return f"https://{value}"


def _harden_anchor(tag: str) -> str:
    def _rewrite_href(match: "re.Match[str]") -> str:
        prefix = match.group(1)
        if match.group(2) is not None:
            return f'{prefix}"{normalize_href(match.group(2))}"'
        if match.group(3) is not None:
            return f"{prefix}'{normalize_href(match.group(3))}'"
        return f'{prefix}"{normalize_href(match.group(4))}"'

    tag = HREF_RE.sub(_rewrite_href, tag, count=1)

    additions = []
    if not _has_attribute(tag, "style"):
        additions.append(f'style="{LINK_STYLE}"')
    if not _has_attribute(tag, "target"):
        additions.append('target="_blank"')
    if not _has_attribute(tag, "rel"):
        additions.append('rel="noopener noreferrer"')

    if not additions:
        return tag

    extra = " " + " ".join(additions)
    if tag.endswith("/>"):
        return tag[:-2].rstrip() + extra + " />"
    return tag[:-1].rstrip() + extra + ">"


def harden_links(html: str) -> str:
    """
    Apply email-safe defaults to every <a> tag in an HTML fragment.

    Example:
        >>> harden_links('<a href="www.example.com" rel="nofollow">x</a>')
        '<a href="https://www.example.com" rel="nofollow" style="color: #0D9488; text-decoration: underline;" target="_blank">x</a>'
    """
    return ANCHOR_TAG_RE.sub(lambda m: _harden_anchor(m.group(0)), html)


# =============================================================================
# Document Assembly
# =============================================================================


def build_email_html(custom_content: str, placeholders: EmailPlaceholders) -> str:
    """
    Build the complete HTML email document.

    Args:
        custom_content: Template body, plain text or HTML (may be empty)
        placeholders: Pre-formatted token values

    Returns:
        Full HTML document with the footer line exactly once
    """
    content = replace_placeholders((custom_content or "").strip(), placeholders)

    if content:
        if not is_html(content):
            content = linkify(content).replace("\n", "<br>")
        content = harden_links(content)
        main = f'  <div style="{CONTENT_BLOCK_STYLE}">\n    <div>{content}</div>\n  </div>'
    else:
        main = ""

    return DOCUMENT_TEMPLATE.format(
        body_style=BODY_STYLE,
        main=main,
        footer_style=FOOTER_STYLE,
        footer=FOOTER_TEXT,
    )


def resolve_subject(template_subject: Optional[str], placeholders: EmailPlaceholders) -> str:
    """Template subject with tokens merged, or the default subject."""
    if template_subject and template_subject.strip():
        return replace_placeholders(template_subject.strip(), placeholders)
    return DEFAULT_SUBJECT.format(grade=placeholders.grade)


def compose_report_email(
    results: CalculationResults,
    template: Optional[Mapping[str, Any]],
    default_cta_url: Optional[str] = None,
) -> ComposedEmail:
    """
    Compose the report email for one set of results.

    Args:
        results: Server-computed calculation results
        template: email_templates row (subject, body, optional config) or None
                  when no template exists for the grade range
        default_cta_url: Fallback for {{cta_url}} (the public app URL)

    Returns:
        ComposedEmail with subject and HTML body
    """
    template_subject = None
    body = ""
    config = TemplateConfig()

    if template is not None:
        template_subject = template.get("subject")
        body = template.get("body") or ""
        config = parse_template_config(template.get("config"))

    placeholders = build_placeholders(results, resolve_cta_url(config, default_cta_url))
    subject = resolve_subject(template_subject, placeholders)
    html = build_email_html(body, placeholders)

    logger.info(
        f"Composed report email: grade={results.grade}, "
        f"template={'yes' if template is not None else 'default'}, "
        f"content_length={len(body.strip())}, html_length={len(html)}"
    )

    return ComposedEmail(subject=subject, html=html)
