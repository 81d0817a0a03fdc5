"""Configuration management for timeblock."""

import json
import logging
from typing import Optional

from pydantic import BaseModel, Field, ValidationError, field_validator, model_validator
from pydantic_settings import BaseSettings

from timeblock.errors import ConfigurationError
from timeblock.models import MINUTES_PER_DAY, Category

logger = logging.getLogger(__name__)


DEFAULT_MAX_DEPTH = 50
DEFAULT_BOUNDARY_HOUR = 5
DEFAULT_COLOR = "#9E9E9E"

DEFAULT_CATEGORIES = [
    Category(id="longterm", label="longTerm", color="#4A90D9", patterns=["#longTerm"]),
    Category(id="shortterm", label="shortTerm", color="#7CB342", patterns=["#shortTerm"]),
]


def parse_legacy_categories(
    tags_str: str,
    colors_str: str = "",
    default_color: str = DEFAULT_COLOR,
) -> list[Category]:
    """Convert the old comma-separated tag settings into categories.

    Args:
        tags_str: e.g. ``"work, #home, [[Project X]]"``.
        colors_str: e.g. ``"work:#ff0000, home:#00ff00"``; keys are
            case-insensitive tag names.
        default_color: Color for tags without an entry in `colors_str`.

    Returns:
        Categories in the order the tags were listed.
    """
    if not tags_str.strip():
        return []

    color_map: dict[str, str] = {}
    for pair in colors_str.split(","):
        tag, _, color = pair.partition(":")
        if tag.strip() and color.strip():
            color_map[tag.strip().lower()] = color.strip()

    categories = []
    for raw in tags_str.split(","):
        raw = raw.strip()
        if not raw:
            continue
        is_page_ref = raw.startswith("[[") and raw.endswith("]]")
        name = raw[2:-2] if is_page_ref else raw.lstrip("#")
        color = color_map.get(name.lower(), default_color)
        categories.append(Category.from_tag(name, color=color, is_page_ref=is_page_ref))
    return categories


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Visible day
    day_start_hour: int = 6
    day_end_hour: int = 22  # up to 30, i.e. 6am of the next day

    # Categories
    categories_json: Optional[str] = None
    tags: str = ""  # legacy comma-separated tag list
    tag_colors: str = ""  # legacy "tag:#color" pairs
    default_color: str = DEFAULT_COLOR

    # Resolution and layout
    max_depth: int = DEFAULT_MAX_DEPTH
    snap_granularity: int = 15

    # Logging
    log_level: str = "INFO"

    @field_validator("day_start_hour")
    @classmethod
    def _clamp_start(cls, value: int) -> int:
        return min(23, max(0, value))

    @field_validator("day_end_hour")
    @classmethod
    def _clamp_end(cls, value: int) -> int:
        return min(30, max(0, value))

    @property
    def next_day_boundary_hour(self) -> int:
        """Hour on the next day up to which entries are appended, 0 for none."""
        if self.day_end_hour > 24:
            return self.day_end_hour - 24
        return 0

    def load_categories(self) -> list[Category]:
        """Load configured categories, falling back to the defaults.

        The JSON setting wins; the legacy tag strings are read only when it
        is not set. A JSON setting that cannot be read yields no categories,
        so every parsed interval is kept uncategorized.
        """
        if self.categories_json:
            try:
                raw = json.loads(self.categories_json)
                return [Category(**item) for item in raw]
            except (json.JSONDecodeError, TypeError, ValidationError) as e:
                logger.error("Failed to parse categories_json, using no categories: %s", e)
                return []

        categories = parse_legacy_categories(
            self.tags, self.tag_colors, self.default_color
        )
        return categories or list(DEFAULT_CATEGORIES)

    class Config:
        env_prefix = "TIMEBLOCK_"
        env_file = ".env"
        env_file_encoding = "utf-8"


class PipelineConfig(BaseModel):
    """Validated inputs for one pipeline invocation.

    An empty category list is legal and means every parsed interval is kept
    uncategorized.
    """

    categories: list[Category] = Field(default_factory=list)
    max_depth: int = Field(default=DEFAULT_MAX_DEPTH, ge=0)
    boundary_minute: int = Field(
        default=DEFAULT_BOUNDARY_HOUR * 60, ge=0, le=MINUTES_PER_DAY
    )

    @model_validator(mode="after")
    def _check_unique_ids(self) -> "PipelineConfig":
        seen: set[str] = set()
        for category in self.categories:
            if category.id in seen:
                raise ValueError(f"Duplicate category id: {category.id}")
            seen.add(category.id)
        return self

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        categories: Optional[list[Category]] = None,
    ) -> "PipelineConfig":
        """Build a pipeline config from application settings.

        Raises:
            ConfigurationError: If the resulting configuration is invalid.
        """
        try:
            return cls(
                categories=settings.load_categories() if categories is None else categories,
                max_depth=settings.max_depth,
                boundary_minute=settings.next_day_boundary_hour * 60,
            )
        except ValidationError as e:
            raise ConfigurationError(str(e)) from e

    class Config:
        frozen = True


settings = Settings()
