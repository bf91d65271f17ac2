"""Small text helpers shared by scaffolding and reports."""

from __future__ import annotations

import re
from datetime import date

_TEMPLATE_VAR = re.compile(r"\{\{\s*([a-zA-Z0-9_]+)\s*\}\}")
_NON_SLUG = re.compile(r"[^a-z0-9]+")
SLUG_PATTERN = re.compile(r"^[a-z0-9]+(?:-[a-z0-9]+)*$")

MAX_SLUG_LENGTH = 80


def slugify(text: str) -> str:
    """Lower-case, collapse non-alphanumerics to '-', trim dashes, cap length."""
    slug = _NON_SLUG.sub("-", text.strip().lower()).strip("-")
    return slug[:MAX_SLUG_LENGTH].rstrip("-")


def today_str(today: date | None = None) -> str:
    """Local date as YYYY-MM-DD."""
    return (today or date.today()).isoformat()


def render_template(template: str, variables: dict[str, str]) -> str:
    """Replace ``{{ name }}`` placeholders; unknown names render empty."""
    return _TEMPLATE_VAR.sub(lambda m: variables.get(m.group(1), ""), template)


def is_valid_slug(slug: str) -> bool:
    """True for what ``slugify`` can produce: lower-case words joined by single dashes."""
    return len(slug) <= MAX_SLUG_LENGTH and SLUG_PATTERN.match(slug) is not None
