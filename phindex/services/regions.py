from typing import Optional

from phindex.services.catalog import REGION_MAPPING, REGION_SLUGS


def region_for(subregion: Optional[str]) -> Optional[str]:
    """Return the region a subregion belongs to (case-insensitive), or None."""
    if not subregion:
        return None
    needle = subregion.strip().lower()
    for region, subregions in REGION_MAPPING.items():
        if any(sub.lower() == needle for sub in subregions):
            return region
    return None


def region_contains(region: str, subregion: Optional[str]) -> bool:
    if not subregion:
        return False
    needle = subregion.strip().lower()
    return any(sub.lower() == needle for sub in REGION_MAPPING.get(region, []))


def region_from_slug(slug: str) -> Optional[str]:
    return REGION_SLUGS.get((slug or "").strip().lower())


def check_answer(selected_region: str, most_voted_subregion: Optional[str]) -> tuple[bool, Optional[str]]:
    """Score one map-game answer.

    Returns ``(correct, correct_region)``. A profile nobody has voted on yet
    accepts any answer. ``correct_region`` is only filled in for wrong answers.
    """
    if not most_voted_subregion:
        return True, None
    if region_contains(selected_region, most_voted_subregion):
        return True, None
    return False, region_for(most_voted_subregion)
