"""
Text sanitization and identifier normalization.

Labels end up inside double-quoted strings of the generated script, where
`$` starts a global macro and a backtick starts a local one. Every helper
here strips or replaces those characters so the rendered text can never be
reinterpreted.

All helpers are idempotent: applying them twice gives the same result as
applying them once.
"""

import re

INTERPOLATION_CHAR = "$"
INTERPOLATION_SUBSTITUTE = "S"
QUOTE_CHARS = ('"', "`")

_LINE_BREAK_RE = re.compile(r"[\r\n]+")
_WHITESPACE_RE = re.compile(r"\s+")
_DIGITS_RE = re.compile(r"[0-9]+")


def _strip_line_breaks(text: str) -> str:
    text = _LINE_BREAK_RE.sub(" ", text)
    return _WHITESPACE_RE.sub(" ", text).strip()


def _strip_quotes(text: str) -> str:
    for quote in QUOTE_CHARS:
        text = text.replace(quote, "")
    return text


def sanitize_label(text: str) -> str:
    """
    Clean a question label for use in generated code.

    Removes line breaks and quote characters, and replaces the
    interpolation character with a harmless substitute.

    Args:
        text: Raw label text (None is treated as empty)

    Returns:
        Sanitized single-line label
    """
    if not text:
        return ""
    text = _strip_quotes(text).replace(INTERPOLATION_CHAR, INTERPOLATION_SUBSTITUTE)
    return _strip_line_breaks(text)


def sanitize_choice_label(text: str) -> str:
    """
    Clean a value label.

    Same as sanitize_label except that the interpolation character is
    dropped rather than substituted.
    """
    if not text:
        return ""
    text = _strip_quotes(text).replace(INTERPOLATION_CHAR, "")
    return _strip_line_breaks(text)


def normalize_name(name: str) -> str:
    """Lowercase a question name and drop periods."""
    if not name:
        return ""
    return name.strip().lower().replace(".", "")


def normalize_list_name(list_name: str) -> str:
    """Normalize a choice list name so survey types and choice rows join."""
    if not list_name:
        return ""
    return list_name.strip().replace("-", "_")


def is_digit_code(code: str) -> bool:
    """True if the code is made only of ASCII digits."""
    return bool(code) and _DIGITS_RE.fullmatch(code) is not None


def collapse_type(raw_type: str) -> str:
    """
    Collapse internal whitespace to underscores.

    Lets the XLSForm spelling "begin repeat" match the "begin_repeat"
    marker without touching the stored raw type.
    """
    if not raw_type:
        return ""
    return _WHITESPACE_RE.sub("_", raw_type.strip())


__all__ = [
    "INTERPOLATION_CHAR",
    "INTERPOLATION_SUBSTITUTE",
    "sanitize_label",
    "sanitize_choice_label",
    "normalize_name",
    "normalize_list_name",
    "is_digit_code",
    "collapse_type",
]
