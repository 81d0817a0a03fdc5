"""Pipeline orchestrator.

Runs parse → resolve → layout over one or more record batches and returns
positioned intervals sorted by start time. Every call is independent: the
result replaces whatever the caller showed before.
"""

import logging
from dataclasses import dataclass
from typing import Mapping, Optional

from pydantic import BaseModel, Field

from timeblock.config import PipelineConfig
from timeblock.models import (
    MINUTES_PER_DAY,
    Category,
    LayoutItem,
    PositionedInterval,
    Record,
    ScopeKind,
    TimeInterval,
)
from timeblock.storage import build_lookup_maps

from .stage_layout import OverlapLayoutEngine
from .stage_parse import IntervalParser
from .stage_resolve import CategoryResolver

logger = logging.getLogger(__name__)


class ScopeBatch(BaseModel):
    """Records from one scope, e.g. the records of one day page."""

    name: str
    records: list[Record] = Field(default_factory=list)
    kind: ScopeKind = ScopeKind.PRIMARY

    class Config:
        frozen = True


@dataclass
class _Candidate:
    """A record that survived parsing and category filtering."""

    record: Record
    interval: TimeInterval
    category: Optional[Category]
    scope: str


class Orchestrator:
    """Combines the pipeline stages over batches of records."""

    def __init__(
        self,
        config: Optional[PipelineConfig] = None,
        parser: Optional[IntervalParser] = None,
        engine: Optional[OverlapLayoutEngine] = None,
    ):
        """Initialize the orchestrator.

        Args:
            config: Validated pipeline configuration. Defaults to no
                categories, so everything is kept uncategorized.
            parser: Interval parser, defaults to all formats.
            engine: Layout engine, defaults to a validating engine.

        Raises:
            ConfigurationError: If a category marker cannot be compiled.
        """
        self.config = config or PipelineConfig()
        self.parser = parser or IntervalParser()
        self.engine = engine or OverlapLayoutEngine()
        self.resolver = CategoryResolver(self.config.categories, self.config.max_depth)

    @property
    def requires_category(self) -> bool:
        """Uncategorized records are dropped only when categories exist."""
        return bool(self.config.categories)

    def _collect(
        self,
        scope: ScopeBatch,
        content_by_id: Mapping[str, str],
        parent_by_id: Mapping[str, Optional[str]],
    ) -> list[_Candidate]:
        next_period = scope.kind == ScopeKind.NEXT_PERIOD
        candidates = []

        for record in scope.records:
            try:
                interval = self.parser.parse(record.text)
                if interval is None:
                    continue

                if next_period:
                    if interval.start_minute >= self.config.boundary_minute:
                        continue
                    interval = interval.shifted(MINUTES_PER_DAY)

                category = self.resolver.resolve_batch(record.id, content_by_id, parent_by_id)
                if category is None and self.requires_category:
                    continue
            except Exception as e:
                logger.debug("Skipping record %s in scope %s: %s", record.id, scope.name, e)
                continue

            candidates.append(
                _Candidate(record=record, interval=interval, category=category, scope=scope.name)
            )

        logger.debug(
            "Scope %s: %d of %d records kept", scope.name, len(candidates), len(scope.records)
        )
        return candidates

    def run(
        self,
        scopes: list[ScopeBatch],
        content_by_id: Optional[Mapping[str, str]] = None,
        parent_by_id: Optional[Mapping[str, Optional[str]]] = None,
    ) -> list[PositionedInterval]:
        """Run the full pipeline over `scopes`.

        Args:
            scopes: Record batches; next-period scopes are shifted one day.
            content_by_id: Optional text cache covering ancestors that are
                not part of any scope (e.g. page-level records).
            parent_by_id: Optional parent-pointer cache matching
                `content_by_id`.

        Returns:
            Positioned intervals sorted by start minute; equal starts keep
            scope order, then record order.
        """
        all_records = [record for scope in scopes for record in scope.records]
        contents, parents = build_lookup_maps(all_records)
        if content_by_id:
            contents.update(content_by_id)
        if parent_by_id:
            parents.update(parent_by_id)

        candidates: list[_Candidate] = []
        for scope in scopes:
            candidates.extend(self._collect(scope, contents, parents))
        candidates.sort(key=lambda candidate: candidate.interval.start_minute)

        slots = self.engine.layout(
            [
                LayoutItem(
                    id=candidate.record.id,
                    start=candidate.interval.start_minute,
                    end=candidate.interval.end_minute,
                )
                for candidate in candidates
            ]
        )

        return [
            PositionedInterval(
                record=candidate.record,
                interval=candidate.interval,
                category=candidate.category,
                column=slot.column,
                total_columns=slot.total_columns,
                scope=candidate.scope,
            )
            for candidate, slot in zip(candidates, slots)
        ]

    def run_day(
        self,
        records: list[Record],
        next_day_records: Optional[list[Record]] = None,
        content_by_id: Optional[Mapping[str, str]] = None,
        parent_by_id: Optional[Mapping[str, Optional[str]]] = None,
        name: str = "today",
    ) -> list[PositionedInterval]:
        """Lay out one day, appending the next day's early entries if given."""
        scopes = [ScopeBatch(name=name, records=records)]
        if next_day_records is not None and self.config.boundary_minute > 0:
            scopes.append(
                ScopeBatch(
                    name=f"{name}+1",
                    records=next_day_records,
                    kind=ScopeKind.NEXT_PERIOD,
                )
            )
        return self.run(scopes, content_by_id, parent_by_id)

    def run_week(
        self,
        days: Mapping[str, list[Record]],
        content_by_id: Optional[Mapping[str, str]] = None,
        parent_by_id: Optional[Mapping[str, Optional[str]]] = None,
    ) -> dict[str, list[PositionedInterval]]:
        """Lay out several days independently, keyed by scope name."""
        return {
            name: self.run([ScopeBatch(name=name, records=records)], content_by_id, parent_by_id)
            for name, records in days.items()
        }


def run_pipeline(
    scopes: list[ScopeBatch],
    categories: Optional[list[Category]] = None,
    **config_overrides,
) -> list[PositionedInterval]:
    """One-shot convenience wrapper around Orchestrator.run."""
    config = PipelineConfig(categories=categories or [], **config_overrides)
    return Orchestrator(config).run(scopes)
