"""String similarity primitives.

Normalized Levenshtein similarity plus a keyword-overlap check that catches
brand matches edit distance alone misses ("Viana" vs "Birrificio
Indipendente Viana"). Also the URL/email/address normalizers shared by the
matcher and the grounding check.
"""

import re
from collections.abc import Iterable

from rapidfuzz.distance import Levenshtein
from unidecode import unidecode

from brewguard.rules.models import DEFAULT_RULES

_PUNCT_RE = re.compile(r"[^\w\s]")
_SPACE_RE = re.compile(r"\s+")


def normalize(text: str | None) -> str:
    """Normalize a name: ASCII, lowercase, no punctuation, single spaces."""
    if not text:
        return ""
    text = unidecode(text).lower()
    text = _PUNCT_RE.sub("", text)
    return _SPACE_RE.sub(" ", text).strip()


def levenshtein(a: str, b: str) -> int:
    """Edit distance with unit cost insert/delete/substitute."""
    return Levenshtein.distance(a, b)


def similarity(a: str | None, b: str | None) -> float:
    """Similarity in [0, 1] between two names.

    1.0 when the normalized forms are equal (two empty names included),
    0.0 when exactly one is empty, otherwise 1 - distance / longer length.
    """
    n1 = normalize(a)
    n2 = normalize(b)
    if n1 == n2:
        return 1.0
    if not n1 or not n2:
        return 0.0
    return Levenshtein.normalized_similarity(n1, n2)


def _significant_tokens(normalized: str) -> list[str]:
    return [t for t in normalized.split() if len(t) > 3]


def has_common_keywords(
    a: str | None,
    b: str | None,
    keywords: Iterable[str] = DEFAULT_RULES.lexicon.keywords,
    token_threshold: float = DEFAULT_RULES.match.token,
) -> bool:
    """Whether two names share a brand keyword or two significant tokens.

    Args:
        a: Candidate name (its tokens are the ones counted)
        b: Canonical name
        keywords: Brand roots and style words that identify a brewery
        token_threshold: Per-token similarity above which tokens count as shared

    Returns:
        True on a shared keyword, or when at least two tokens longer than
        three characters in `a` each resemble some token of `b`.
    """
    n1 = normalize(a)
    n2 = normalize(b)
    if not n1 or not n2:
        return False

    for keyword in keywords:
        if keyword in n1 and keyword in n2:
            return True

    parts2 = _significant_tokens(n2)
    if not parts2:
        return False
    common = [
        part for part in _significant_tokens(n1)
        if any(similarity(part, other) > token_threshold for other in parts2)
    ]
    return len(common) >= 2


# ============================================================================
# Auxiliary field normalizers
# ============================================================================


def clean_url(url: str | None) -> str:
    """Lowercase URL without scheme, leading www. or trailing slash."""
    if not url:
        return ""
    url = url.strip().lower()
    url = re.sub(r"^[a-z][a-z0-9+.-]*://", "", url)
    url = re.sub(r"^www\.", "", url)
    return url.rstrip("/")


def url_domain(url: str | None) -> str:
    """Host part of a URL, lowercase, without www. or port."""
    cleaned = clean_url(url)
    if not cleaned:
        return ""
    host = re.split(r"[/?#]", cleaned, maxsplit=1)[0]
    host = host.rsplit("@", 1)[-1].split(":", 1)[0]
    return re.sub(r"^www\.", "", host)


def email_domain(email: str | None) -> str:
    """Domain part of an email address, empty when it is not an address."""
    if not email or "@" not in email:
        return ""
    domain = email.strip().lower().rsplit("@", 1)[1]
    return re.sub(r"^www\.", "", domain)


def normalize_address(address: str | None) -> str:
    """Normalize an address the same way as a name."""
    return normalize(address)


def domains_match(a: str, b: str) -> bool:
    """Substring match in either direction between two bare domains."""
    if not a or not b:
        return False
    return a in b or b in a
