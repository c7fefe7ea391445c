"""
In-memory museum catalog.

In production, this would be a read-only view over the museum collection
of the document database that the admin panel manages.
"""

import logging
from typing import Iterable, Optional, Protocol

from src.schemas.museum_schema import Museum

logger = logging.getLogger(__name__)


class MuseumCatalog(Protocol):
    def list_active(self, limit: Optional[int] = None) -> list[Museum]: ...

    def get(self, museum_id: str) -> Optional[Museum]: ...


SEED_MUSEUMS: list[dict] = [
    {
        "id": "m-visvesvaraya",
        "name": "Visvesvaraya Industrial & Technological Museum",
        "slug": "visvesvaraya-industrial-technological-museum",
        "description": "Science and technology galleries named after Sir M. Visvesvaraya.",
        "price": 100,
    },
    {
        "id": "m-hal",
        "name": "HAL Heritage & Aerospace Museum",
        "slug": "hal-heritage-aerospace-museum",
        "description": "The heritage of Hindustan Aeronautics Limited and India's aerospace achievements.",
        "price": 150,
    },
    {
        "id": "m-nimhans",
        "name": "NIMHANS Brain Museum",
        "slug": "nimhans-brain-museum",
        "description": "The human brain and neuroscience research.",
        "price": 50,
    },
    {
        "id": "m-kempegowda",
        "name": "Kempegowda Museum",
        "slug": "kempegowda-museum",
        "description": "The founder of Bangalore, Kempegowda, and the city's history.",
        "price": 75,
    },
    {
        "id": "m-ime",
        "name": "Indian Music Experience Museum",
        "slug": "indian-music-experience-museum",
        "description": "India's musical heritage through interactive exhibits.",
        "price": 200,
    },
    {
        "id": "m-government",
        "name": "Government Museum Bengaluru",
        "slug": "government-museum-bengaluru",
        "description": "Archaeological and geological collections in one of India's oldest museums.",
        "price": 30,
    },
]


MIN_PARTIAL_MATCH_LENGTH = 3
MIN_SIGNIFICANT_WORD_LENGTH = 3
MIN_SHARED_WORDS = 2
MIN_SHARED_WORD_RATIO = 0.5


def _significant_words(text: str) -> list[str]:
    return [w for w in text.split() if len(w) >= MIN_SIGNIFICANT_WORD_LENGTH]


def match_museum(
    query: str, museums: list[Museum], listing: Optional[list[Museum]] = None
) -> Optional[Museum]:
    """
    Match a visitor's message to a museum. Tiers, first hit wins:

    0. a bare number picks that entry (1-based) of ``listing``
    1. exact case-insensitive name or slug
    2. substring either way, both sides at least 3 characters
    3. shared words longer than 2 characters: at least 2 in common, or at
       least half of the message's words
    """
    normalized = query.lower().strip()
    if not normalized:
        return None

    if listing and normalized.isdigit():
        index = int(normalized)
        if 1 <= index <= len(listing):
            return listing[index - 1]

    for museum in museums:
        if normalized in (museum.name.lower().strip(), museum.slug.lower().strip()):
            return museum

    for museum in museums:
        name = museum.name.lower().strip()
        slug = museum.slug.lower().strip()
        contained = (
            name in normalized or normalized in name
            or (slug and (slug in normalized or normalized in slug))
        )
        if contained and len(name) >= MIN_PARTIAL_MATCH_LENGTH and len(normalized) >= MIN_PARTIAL_MATCH_LENGTH:
            return museum

    query_words = _significant_words(normalized)
    for museum in museums:
        museum_words = _significant_words(museum.name.lower())
        shared = [w for w in query_words if w in museum_words]
        if len(shared) >= MIN_SHARED_WORDS or (
            query_words and len(shared) / len(query_words) >= MIN_SHARED_WORD_RATIO
        ):
            return museum
    return None


class InMemoryMuseumCatalog:
    """Catalog backed by a dict, preserving insertion order for listings."""

    def __init__(self, museums: Optional[Iterable[Museum]] = None) -> None:
        if museums is None:
            museums = [Museum(**record) for record in SEED_MUSEUMS]
        self._museums: dict[str, Museum] = {m.id: m for m in museums}

    def list_active(self, limit: Optional[int] = None) -> list[Museum]:
        active = [m for m in self._museums.values() if m.is_active]
        return active[:limit] if limit is not None else active

    def get(self, museum_id: str) -> Optional[Museum]:
        return self._museums.get(museum_id)

    def add(self, museum: Museum) -> None:
        self._museums[museum.id] = museum
        logger.info("Museum added to catalog: %s", museum.name)

    def remove(self, museum_id: str) -> None:
        self._museums.pop(museum_id, None)
