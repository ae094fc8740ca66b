import random
import re
import unicodedata

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from phindex.models.profile_model import PersonProfile

_ADJECTIVES = (
    "Amber", "Brave", "Calm", "Clever", "Curious", "Swift", "Gentle", "Bold",
    "Quiet", "Lucky", "Sunny", "Misty", "Noble", "Rapid", "Silver", "Wild",
)
_ANIMALS = (
    "Falcon", "Otter", "Lynx", "Heron", "Badger", "Fox", "Ibex", "Panda",
    "Raven", "Gecko", "Bison", "Koala", "Puffin", "Marten", "Crane", "Wolf",
)


def generate_nickname(rng: random.Random | None = None) -> str:
    rng = rng or random
    return f"{rng.choice(_ADJECTIVES)}{rng.choice(_ANIMALS)}{rng.randint(100, 9999)}"


def slugify(name: str) -> str:
    """
    URL slug for a profile name:
    - strip accents
    - lowercase
    - non-alphanumerics -> '-'
    - collapse and trim dashes
    """
    text = unicodedata.normalize("NFKD", name or "").encode("ascii", "ignore").decode("ascii")
    text = re.sub(r"[^a-z0-9]+", "-", text.lower())
    text = text.strip("-")
    return text or "profile"


async def generate_unique_slug(session: AsyncSession, name: str) -> str:
    base = slugify(name)
    result = await session.execute(
        select(PersonProfile.slug).where(
            (PersonProfile.slug == base) | (PersonProfile.slug.like(f"{base}-%"))
        )
    )
    taken = set(result.scalars().all())
    if base not in taken:
        return base

    n = 2
    while f"{base}-{n}" in taken:
        n += 1
    return f"{base}-{n}"
