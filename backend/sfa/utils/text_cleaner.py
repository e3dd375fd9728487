import re
from typing import Any, Optional


def normalize_whitespace(text: Any) -> str:
    if text is None:
        return ""
    text = str(text).strip()
    text = re.sub(r"\s+", " ", text)
    return text


def normalize_lookup_key(text: Any) -> str:
    """
    Key used for case-insensitive exact matching of master-data names:
    - strip
    - lowercase
    Inner whitespace is kept as typed.
    """
    if text is None:
        return ""
    return str(text).strip().lower()


def normalize_header(header: Any) -> str:
    """Lowercase, strip, and collapse non-alphanumerics to underscore."""
    cleaned = "".join(ch.lower() if ch.isalnum() else "_" for ch in str(header))
    return "_".join([segment for segment in cleaned.split("_") if segment])


def blank_to_none(text: Any) -> Optional[str]:
    text = normalize_whitespace(text)
    return text or None
