"""Category Resolution Stage - Inherit categories through the outline.

A record belongs to the category of the nearest line in its ancestor chain
(itself first) whose text carries one of the category's markers. Two lookup
strategies share the same walk:
- single mode reads text and parent pointers from a RecordStore
- batch mode reads them from precomputed dicts, for scanning many records

Walks stop at a root, after `max_depth` ancestors, or on a repeated id, so
malformed or cyclic hierarchies resolve to None instead of looping.
"""

import re
from typing import Callable, Iterator, Mapping, Optional

from timeblock.config import DEFAULT_MAX_DEPTH
from timeblock.errors import ConfigurationError
from timeblock.models import Category, SurfaceFormKind, parse_surface_form
from timeblock.storage import RecordStore


def build_marker_pattern(form: str) -> str:
    """Regex source matching one surface form in text.

    Hash tags must not run on into a longer tag (``#tag2``, ``#tag-x``);
    page references match both ``[[Page]]`` and ``#[[Page]]``.
    """
    kind, name = parse_surface_form(form)
    escaped = re.escape(name)
    if kind == SurfaceFormKind.PAGE_REF:
        return rf"#?\[\[{escaped}\]\]"
    return rf"#{escaped}(?![\w-])"


def build_matcher(category: Category) -> re.Pattern:
    """Compile one case-insensitive matcher covering all of a category's forms.

    Raises:
        ConfigurationError: If the category has no usable surface forms.
    """
    if not category.patterns:
        raise ConfigurationError(f"Category {category.id!r} has no patterns")
    try:
        alternatives = [build_marker_pattern(form) for form in category.patterns]
        return re.compile("|".join(alternatives), re.IGNORECASE)
    except (ValueError, re.error) as e:
        raise ConfigurationError(f"Category {category.id!r}: {e}") from e


def iter_ancestor_chain(
    record_id: str,
    parent_of: Callable[[str], Optional[str]],
    max_depth: int = DEFAULT_MAX_DEPTH,
) -> Iterator[str]:
    """Yield `record_id` and then its ancestors, nearest first.

    Stops after `max_depth` ancestors, at a record with no parent, or when
    an id repeats.
    """
    visited: set[str] = set()
    current: Optional[str] = record_id
    hops = 0
    while current is not None and current not in visited:
        visited.add(current)
        yield current
        if hops >= max_depth:
            return
        current = parent_of(current)
        hops += 1


class CategoryResolver:
    """Finds the nearest category for a record.

    Matchers are compiled once per resolver, so build one resolver per
    invocation and reuse it for every record in the batch.
    """

    def __init__(
        self,
        categories: list[Category],
        max_depth: int = DEFAULT_MAX_DEPTH,
    ):
        """Initialize the resolver.

        Args:
            categories: Configured categories; earlier entries win when one
                line carries markers for several.
            max_depth: Maximum number of ancestors visited above the record.
        """
        self.categories = list(categories)
        self.max_depth = max_depth
        self.matchers = [(category, build_matcher(category)) for category in self.categories]

    def match_text(self, text: str) -> Optional[Category]:
        """Return the first category whose markers appear in `text`."""
        if not text:
            return None
        for category, matcher in self.matchers:
            if matcher.search(text):
                return category
        return None

    def _walk(
        self,
        record_id: str,
        text_of: Callable[[str], str],
        parent_of: Callable[[str], Optional[str]],
    ) -> Optional[Category]:
        if not self.matchers:
            return None
        for node_id in iter_ancestor_chain(record_id, parent_of, self.max_depth):
            category = self.match_text(text_of(node_id))
            if category is not None:
                return category
        return None

    def resolve(self, record_id: str, store: RecordStore) -> Optional[Category]:
        """Resolve by fetching each ancestor from `store`."""
        return self._walk(record_id, store.get_text, store.get_parent_id)

    def resolve_batch(
        self,
        record_id: str,
        content_by_id: Mapping[str, str],
        parent_by_id: Mapping[str, Optional[str]],
    ) -> Optional[Category]:
        """Resolve against precomputed text and parent maps.

        Ids missing from the maps are treated as empty roots.
        """
        return self._walk(
            record_id,
            lambda node_id: content_by_id.get(node_id, ""),
            parent_by_id.get,
        )


def find_category(
    record_id: str,
    categories: list[Category],
    store: RecordStore,
    max_depth: int = DEFAULT_MAX_DEPTH,
) -> Optional[Category]:
    """Single-lookup resolution for one record."""
    return CategoryResolver(categories, max_depth).resolve(record_id, store)


def find_category_batch(
    record_id: str,
    categories: list[Category],
    content_by_id: Mapping[str, str],
    parent_by_id: Mapping[str, Optional[str]],
    max_depth: int = DEFAULT_MAX_DEPTH,
) -> Optional[Category]:
    """Batch-lookup resolution for one record."""
    return CategoryResolver(categories, max_depth).resolve_batch(
        record_id, content_by_id, parent_by_id
    )


def find_category_in_text(text: str, categories: list[Category]) -> Optional[Category]:
    """Match a single line of text without walking any ancestors."""
    return CategoryResolver(categories).match_text(text)
