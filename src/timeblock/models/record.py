"""Record model for annotated outline lines."""

from typing import Optional

from pydantic import Field

from .base import BaseCoreModel


class Record(BaseCoreModel):
    """
    One line of outline text owned by the host document store.

    The core only reads records; ancestors are reached through `parent_id`.
    """

    id: str = Field(..., min_length=1, description="Store-assigned record id")
    text: str = Field(default="", description="Raw line text")
    parent_id: Optional[str] = Field(
        None, description="Parent record id, None for top-level records"
    )
    order: int = Field(default=0, description="Sibling order key")
