"""Category models and surface-form parsing."""

from typing import Optional

from pydantic import Field, field_validator

from .base import BaseCoreModel, SurfaceFormKind


def parse_surface_form(form: str) -> tuple[SurfaceFormKind, str]:
    """Split a configured surface form into its kind and bare name.

    Accepted spellings: ``#tag``, ``tag``, ``[[Page]]`` and ``#[[Page]]``.

    Raises:
        ValueError: If the form has no name.
    """
    text = form.strip()
    if text.startswith("#[[") and text.endswith("]]"):
        kind, name = SurfaceFormKind.PAGE_REF, text[3:-2]
    elif text.startswith("[[") and text.endswith("]]"):
        kind, name = SurfaceFormKind.PAGE_REF, text[2:-2]
    elif text.startswith("#"):
        kind, name = SurfaceFormKind.HASH_TAG, text[1:]
    else:
        kind, name = SurfaceFormKind.HASH_TAG, text

    name = name.strip()
    if not name:
        raise ValueError(f"Surface form {form!r} has no name")
    return kind, name


class Category(BaseCoreModel):
    """
    Labeled, colored classification selected by markers in record text.

    Categories are configuration data and are passed in fresh on every
    invocation. Their order in the configuration decides which one wins
    when a single line carries several markers.
    """

    id: str = Field(..., min_length=1)
    label: str = Field(..., min_length=1)
    color: str = Field(default="#9E9E9E", description="CSS hex color")
    patterns: list[str] = Field(
        ..., min_length=1, description="Surface forms: #tag, [[Page]], #[[Page]]"
    )

    @field_validator("patterns")
    @classmethod
    def _check_patterns(cls, value: list[str]) -> list[str]:
        for form in value:
            parse_surface_form(form)
        return [form.strip() for form in value]

    @classmethod
    def from_tag(
        cls,
        tag: str,
        color: str = "#9E9E9E",
        is_page_ref: bool = False,
        label: Optional[str] = None,
    ) -> "Category":
        """Build a single-marker category from a bare tag name."""
        name = tag.strip().lstrip("#")
        if is_page_ref:
            if name.startswith("[[") and name.endswith("]]"):
                name = name[2:-2]
            form = f"[[{name}]]"
        else:
            form = f"#{name}"
        return cls(id=name.lower(), label=label or name, color=color, patterns=[form])

    @property
    def surface_forms(self) -> list[tuple[SurfaceFormKind, str]]:
        return [parse_surface_form(form) for form in self.patterns]

    @property
    def primary_marker(self) -> str:
        """Marker appended to text when a record is assigned this category."""
        kind, name = self.surface_forms[0]
        if kind == SurfaceFormKind.PAGE_REF:
            return f"[[{name}]]"
        return f"#{name}"

    @property
    def is_light(self) -> bool:
        """Whether the color is light enough to need dark foreground text."""
        color = self.color.lstrip("#")
        if len(color) == 3:
            color = "".join(ch * 2 for ch in color)
        try:
            r, g, b = (int(color[i:i + 2], 16) for i in (0, 2, 4))
        except ValueError:
            return False
        luminance = (0.299 * r + 0.587 * g + 0.114 * b) / 255
        return luminance > 0.5
