"""Fixed vocabularies: characteristic types, profile categories and regions."""

PHENOTYPE = "phenotype"

GEOGRAPHIC_TYPES = (
    "Primary Geographic",
    "Secondary Geographic",
    "Tertiary Geographic",
)

PHENOTYPE_TYPES = (
    "Primary Phenotype",
    "Secondary Phenotype",
    "Tertiary Phenotype",
)

PHYSICAL_TYPES = (
    "Skin Color",
    "Hair Color",
    "Hair Texture",
    "Head Breadth",
    "Head Type",
    "Body Type",
    "Nasal Breadth",
    "Facial Breadth",
    "Jaw Type",
    "Eye Color",
)

CHARACTERISTIC_TYPES = frozenset((PHENOTYPE,) + GEOGRAPHIC_TYPES + PHENOTYPE_TYPES + PHYSICAL_TYPES)

# URL slug -> stored category name
CATEGORIES = {
    "community": "User Profiles",
    "pop-culture": "Pop Culture",
    "music-and-entertainment": "Music and Entertainment",
    "arts": "Arts",
    "philosophy": "Philosophy",
    "sciences": "Sciences",
    "sports": "Sports",
    "business": "Business",
    "politics": "Politics",
}

REGION_MAPPING = {
    "Europe": [
        "Eastern Europe",
        "Central Europe",
        "Southern Europe",
        "Northern Europe",
    ],
    "Africa": [
        "North Africa",
        "East Africa",
        "Sub-Saharan Africa",
    ],
    "Middle East": [
        "Levant",
        "Anatolia",
        "Arabian Peninsula",
        "Persian Plateau",
    ],
    "Asia": [
        "Central Asia",
        "Eastern Asia",
        "Southern Asia",
        "Southeastern Asia",
    ],
    "Americas": [
        "Northern America",
        "Central America",
        "Southern America",
    ],
    "Oceania": [
        "Australia and New Zealand",
        "Melanesia",
        "Polynesia",
    ],
}

REGION_SLUGS = {
    "europe": "Europe",
    "africa": "Africa",
    "middle-east": "Middle East",
    "asia": "Asia",
    "americas": "Americas",
    "oceania": "Oceania",
}


def is_known_characteristic(characteristic_type: str) -> bool:
    return characteristic_type in CHARACTERISTIC_TYPES


def category_name(slug: str) -> str | None:
    return CATEGORIES.get((slug or "").strip().lower())
