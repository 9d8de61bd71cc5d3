"""
Derived identifiers for articles and reporter accounts.

Slugs and short ids are human-facing alternate keys; the unique indexes on
the underlying columns are what actually guarantees uniqueness.
"""

import logging
import random
import re
import secrets
import string
import time
import unicodedata

logger = logging.getLogger(__name__)

SHORT_ID_LENGTH = 10
SHORT_ID_RANDOM_CHARS = 6
FALLBACK_PREFIX = "item"

_BASE36_ALPHABET = string.digits + string.ascii_lowercase
_WHITESPACE_RE = re.compile(r"\s+")
_HYPHENS_RE = re.compile(r"-+")


def _now_ms() -> int:
    return time.time_ns() // 1_000_000


def base36(number: int) -> str:
    """
    Encode a non-negative integer in lowercase base 36.

    >>> base36(35)
    'z'
    """
    if number < 0:
        msg = "base36() only encodes non-negative integers"
        raise ValueError(msg)
    if number == 0:
        return "0"
    digits = []
    while number:
        number, rem = divmod(number, 36)
        digits.append(_BASE36_ALPHABET[rem])
    return "".join(reversed(digits))


def fallback_slug() -> str:
    """Synthetic slug used when a title has nothing worth keeping."""
    return f"{FALLBACK_PREFIX}-{_now_ms()}-{round(random.random() * 1e6)}"


def _keep(char: str) -> bool:
    if char == "-" or char.isspace():
        return True
    return unicodedata.category(char)[0] in ("L", "N")


def slugify(title: str) -> str:
    """
    Turn a title into a URL-safe slug.

    Letters of any script survive; accents are reduced to their base letter.
    Returns an empty string when nothing is retainable.

    >>> slugify("Road Accident in Moradabad: 3 Injured")
    'road-accident-in-moradabad-3-injured'
    """
    # Lowercase after decomposing: NFKD can yield capitals (𝐁 -> B).
    text = unicodedata.normalize("NFKD", str(title))
    text = unicodedata.normalize("NFKD", text.lower())
    text = "".join(c for c in text if not unicodedata.category(c).startswith("M"))
    text = "".join(c for c in text if _keep(c))
    text = _WHITESPACE_RE.sub("-", text)
    text = _HYPHENS_RE.sub("-", text)
    return text.strip("-")


def generate_slug(title: str) -> str:
    """
    Slug for a title, never empty.

    Any failure while normalizing is logged and the fallback token is used so
    the containing save is not aborted.
    """
    try:
        slug = slugify(title)
    except Exception:
        logger.exception("Slug generation failed for title %r", title)
        slug = ""
    return slug or fallback_slug()


def short_id() -> str:
    """
    Compact share token: base36 timestamp plus a random base36 suffix.

    Not collision-proof under concurrent writes.
    """
    suffix = "".join(
        secrets.choice(_BASE36_ALPHABET) for _ in range(SHORT_ID_RANDOM_CHARS)
    )
    return (base36(_now_ms()) + suffix)[:SHORT_ID_LENGTH]


def reporter_code() -> str:
    """
    Candidate reporter code such as ``R4821357``.

    Last four digits of the epoch seconds followed by a three digit random
    number. Callers must check the store before using it.
    """
    seconds = str(int(time.time()))[-4:]
    return f"R{seconds}{random.randint(100, 999)}"
