"""Address canonicalization for cache keys."""


def normalize_address(address: str) -> str:
    """Canonicalize an address into a cache key.

    Only surrounding whitespace and letter case are folded. Abbreviation
    styles ("St" vs "Street"), punctuation and unit designators are left
    untouched, so such variants map to different keys.
    """
    return address.strip().lower()
