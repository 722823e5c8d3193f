# scrapmarket/filters/text_utils.py

"""Text normalisation helpers shared by the grouper and the scorer."""

import re

from scrapmarket.config.vocabulary import DEFAULT_VOCABULARY, Vocabulary

_WEIGHT_RE = re.compile(
    r"(\d+(?:\.\d+)?)\s*(ml|lts?|kg|grs?|g|l)\b",
    re.IGNORECASE,
)
_NON_WORD_RE = re.compile(r"[^\w\s]")
_NON_SLUG_RE = re.compile(r"[^a-z0-9\s]")
_SPACES_RE = re.compile(r"\s+")


def normalize_brand(brand: str | None) -> str | None:
    """Lowercase, collapse whitespace and strip punctuation.

    Returns ``None`` when nothing is left.
    """
    if not brand:
        return None
    lowered = _SPACES_RE.sub(" ", brand.lower())
    cleaned = _NON_WORD_RE.sub("", lowered).strip()
    return cleaned or None


def brand_key(brand: str | None) -> str:
    """Key fragment for a brand: ``coca_cola`` or ``no_brand``."""
    normalized = normalize_brand(brand)
    if not normalized:
        return "no_brand"
    return normalized.replace(" ", "_")


def slugify(name: str) -> str:
    """Lowercase, drop non-alphanumerics, spaces become underscores."""
    lowered = name.lower().strip()
    stripped = _NON_SLUG_RE.sub("", lowered)
    return _SPACES_RE.sub("_", stripped.strip())


def extract_weight_token(name: str) -> str | None:
    """Pull a compact weight/volume token (``500ml``) out of a name."""
    match = _WEIGHT_RE.search(name)
    if not match:
        return None
    return f"{match.group(1)}{match.group(2).lower()}"


def extract_keywords(
    name: str,
    vocabulary: Vocabulary = DEFAULT_VOCABULARY,
) -> list[str]:
    """Tokenise a product name into comparable keywords.

    Punctuation becomes whitespace; tokens of two characters or fewer
    and stopwords are dropped. Order is preserved.
    """
    if not name:
        return []
    spaced = _NON_WORD_RE.sub(" ", name.lower())
    return [
        word
        for word in spaced.split()
        if len(word) > 2 and word not in vocabulary.stopwords
    ]


def detect_pack_brands(
    name: str,
    vocabulary: Vocabulary = DEFAULT_VOCABULARY,
) -> list[str]:
    """Return the sorted distinct brands of a multi-brand pack.

    A pack is a name containing ``+`` with at least two different
    recognised brand tokens; anything else returns an empty list.
    """
    if "+" not in name:
        return []
    brands = sorted({
        word
        for word in extract_keywords(name, vocabulary)
        if word in vocabulary.pack_brands
    })
    return brands if len(brands) >= 2 else []


def pack_signature(
    name: str,
    vocabulary: Vocabulary = DEFAULT_VOCABULARY,
) -> str | None:
    """Order-independent key for a pack, e.g. ``coca_sprite_pack``."""
    brands = detect_pack_brands(name, vocabulary)
    if not brands:
        return None
    return "_".join(brands) + "_pack"
