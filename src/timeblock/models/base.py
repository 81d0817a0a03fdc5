"""Base models and common types for timeblock."""

from enum import Enum

from pydantic import BaseModel


MINUTES_PER_DAY = 24 * 60


class SurfaceFormKind(str, Enum):
    """Kinds of category markers that can appear in outline text."""

    HASH_TAG = "hash_tag"  # #tag
    PAGE_REF = "page_ref"  # [[Page]] or #[[Page]]


class ScopeKind(str, Enum):
    """Role of a record batch within one pipeline invocation."""

    PRIMARY = "primary"
    NEXT_PERIOD = "next_period"  # early entries shown after the primary day


class BaseCoreModel(BaseModel):
    """Base class for all timeblock models.

    Instances are snapshots handed in by the host for one computation and are
    never mutated afterwards.
    """

    class Config:
        frozen = True
        from_attributes = True
