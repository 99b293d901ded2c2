"""Catalog entry."""
from dataclasses import dataclass
from typing import Optional


@dataclass
class Album:
    """Stored album: title/artist plus opaque cover and barcode."""
    id: int
    title: str
    artist: str
    cover_reference: str
    barcode: Optional[str]
    created_at: str
