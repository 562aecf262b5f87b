"""Placeholder substitution for role SQL templates.

Templates reference values with ``{{key}}``. Only keys present in the
substitution map are replaced; anything else, including unterminated
``{{``, is copied through untouched.
"""

import re

RESERVED_PLACEHOLDERS: tuple[str, ...] = ("name", "password", "expiration")

# Values used when test-preparing a template. "expiration" is deliberately
# empty, matching the values credential issuance has always been checked with.
VALIDATION_VALUES: dict[str, str] = {
    "name": "foo",
    "password": "bar",
    "expiration": "",
}

_PLACEHOLDER_RE = re.compile(r"\{\{([^{}]+)\}\}")


def render_query(template: str, data: dict[str, str]) -> str:
    """Substitute every ``{{key}}`` whose key is in ``data``.

    Keys match exactly and case-sensitively; substituted values are not
    scanned again.
    """
    if not data:
        return template

    pattern = re.compile(r"\{\{(" + "|".join(re.escape(k) for k in data) + r")\}\}")
    return pattern.sub(lambda m: data[m.group(1)], template)


def find_placeholders(template: str) -> list[str]:
    """Return placeholder keys in order of first appearance."""
    seen: dict[str, None] = {}
    for match in _PLACEHOLDER_RE.finditer(template):
        seen.setdefault(match.group(1), None)
    return list(seen)


def unknown_placeholders(template: str) -> list[str]:
    """Placeholder keys that substitution will leave in place."""
    return [key for key in find_placeholders(template) if key not in RESERVED_PLACEHOLDERS]
