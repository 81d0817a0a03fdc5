"""Tests for the pipeline orchestrator."""

import logging
from unittest.mock import patch

import pytest

from timeblock.config import PipelineConfig, Settings
from timeblock.models import Record, ScopeKind
from timeblock.pipeline import Orchestrator, ScopeBatch, run_pipeline


def summary(results):
    return [
        (
            item.record.id,
            item.interval.start_minute,
            item.category.id if item.category else None,
            item.column,
            item.total_columns,
        )
        for item in results
    ]


class TestOrchestrator:
    """Tests for Orchestrator.run."""

    @pytest.fixture
    def orchestrator(self, categories):
        return Orchestrator(PipelineConfig(categories=categories))

    def test_full_pipeline(self, orchestrator, outline_records):
        results = orchestrator.run([ScopeBatch(name="today", records=outline_records)])
        assert summary(results) == [
            ("r1", 600, "work", 0, 2),
            ("r2", 630, "work", 1, 2),
            ("r3", 780, "personal", 0, 1),
        ]
        assert all(item.scope == "today" for item in results)

    def test_sorted_by_start(self, orchestrator, outline_records):
        shuffled = list(reversed(outline_records))
        results = orchestrator.run([ScopeBatch(name="today", records=shuffled)])
        starts = [item.interval.start_minute for item in results]
        assert starts == sorted(starts)

    def test_uncategorized_dropped_when_categories_configured(self, orchestrator):
        records = [
            Record(id="a", text="09:00-10:00 #work"),
            Record(id="b", text="09:00-10:00 untagged"),
        ]
        results = orchestrator.run([ScopeBatch(name="d", records=records)])
        assert [item.record.id for item in results] == ["a"]
        assert results[0].total_columns == 1

    def test_no_categories_keeps_everything(self):
        records = [
            Record(id="a", text="09:00-10:00 #work"),
            Record(id="b", text="09:30-10:00 untagged"),
            Record(id="c", text="no time"),
        ]
        results = Orchestrator().run([ScopeBatch(name="d", records=records)])
        assert summary(results) == [
            ("a", 540, None, 0, 2),
            ("b", 570, None, 1, 2),
        ]

    def test_malformed_category_settings_keep_everything(self):
        settings = Settings(_env_file=None, categories_json="not json")
        orchestrator = Orchestrator(PipelineConfig.from_settings(settings))
        records = [Record(id="a", text="09:00-10:00 untagged")]
        results = orchestrator.run([ScopeBatch(name="d", records=records)])
        assert summary(results) == [("a", 540, None, 0, 1)]

    def test_caller_maps_cover_outside_ancestors(self, orchestrator):
        """Ancestors outside the scope come from the caller's cache."""
        records = [Record(id="a", text="09:00-10:00", parent_id="page")]
        results = orchestrator.run(
            [ScopeBatch(name="d", records=records)],
            content_by_id={"page": "Day page #personal"},
            parent_by_id={"page": None},
        )
        assert summary(results) == [("a", 540, "personal", 0, 1)]

    def test_next_period_shift_and_boundary(self, categories):
        orchestrator = Orchestrator(PipelineConfig(categories=categories, boundary_minute=300))
        today = [Record(id="t", text="23:00-23:59 #work")]
        tomorrow = [
            Record(id="early", text="01:00-02:00 #work"),
            Record(id="edge", text="05:00-06:00 #work"),
            Record(id="late", text="09:00-10:00 #work"),
        ]
        results = orchestrator.run([
            ScopeBatch(name="today", records=today),
            ScopeBatch(name="tomorrow", records=tomorrow, kind=ScopeKind.NEXT_PERIOD),
        ])
        assert [item.record.id for item in results] == ["t", "early"]
        early = results[1]
        assert early.interval.start_minute == 1500
        assert early.interval.end_minute == 1560
        assert early.interval.source_text == "01:00-02:00"
        assert early.scope == "tomorrow"

    def test_run_day(self, categories):
        orchestrator = Orchestrator(PipelineConfig(categories=categories, boundary_minute=360))
        results = orchestrator.run_day(
            [Record(id="t", text="22:00-23:30 #work")],
            [Record(id="n", text="00:30-01:30 #personal")],
        )
        assert summary(results) == [
            ("t", 1320, "work", 0, 1),
            ("n", 1470, "personal", 0, 1),
        ]
        assert results[1].scope == "today+1"

    def test_run_day_zero_boundary_skips_next_day(self, categories):
        orchestrator = Orchestrator(PipelineConfig(categories=categories, boundary_minute=0))
        results = orchestrator.run_day(
            [Record(id="t", text="22:00-23:30 #work")],
            [Record(id="n", text="00:30-01:30 #work")],
        )
        assert [item.record.id for item in results] == ["t"]

    def test_run_week_lays_out_days_independently(self, categories):
        orchestrator = Orchestrator(PipelineConfig(categories=categories))
        week = orchestrator.run_week({
            "mon": [
                Record(id="m1", text="09:00-10:00 #work"),
                Record(id="m2", text="09:00-10:00 #personal"),
            ],
            "tue": [Record(id="t1", text="09:00-10:00 #work")],
        })
        assert list(week) == ["mon", "tue"]
        assert [item.total_columns for item in week["mon"]] == [2, 2]
        assert [item.total_columns for item in week["tue"]] == [1]

    def test_per_record_failure_excluded(self, orchestrator, caplog):
        records = [
            Record(id="bad", text="09:00-10:00 #work"),
            Record(id="good", text="11:00-12:00 #work"),
        ]
        original = orchestrator.resolver.resolve_batch

        def flaky(record_id, *args):
            if record_id == "bad":
                raise RuntimeError("store snapshot corrupted")
            return original(record_id, *args)

        with patch.object(orchestrator.resolver, "resolve_batch", side_effect=flaky):
            with caplog.at_level(logging.DEBUG, logger="timeblock.pipeline.orchestrator"):
                results = orchestrator.run([ScopeBatch(name="d", records=records)])

        assert [item.record.id for item in results] == ["good"]
        assert "Skipping record bad" in caplog.text

    def test_idempotent(self, orchestrator, outline_records):
        scopes = [ScopeBatch(name="today", records=outline_records)]
        first = [item.model_dump_json() for item in orchestrator.run(scopes)]
        second = [item.model_dump_json() for item in orchestrator.run(scopes)]
        assert first == second

    def test_equal_starts_keep_record_order(self):
        records = [
            Record(id="x", text="09:00-10:00"),
            Record(id="y", text="09:00-10:00"),
        ]
        results = Orchestrator().run([ScopeBatch(name="d", records=records)])
        assert summary(results) == [("x", 540, None, 0, 2), ("y", 540, None, 1, 2)]

    def test_does_not_mutate_records(self, orchestrator, outline_records):
        before = [record.model_dump() for record in outline_records]
        orchestrator.run([ScopeBatch(name="today", records=outline_records)])
        assert [record.model_dump() for record in outline_records] == before

    def test_empty_input(self, orchestrator):
        assert orchestrator.run([]) == []


class TestRunPipeline:
    """Tests for the one-shot helper."""

    def test_run_pipeline(self, categories, outline_records):
        results = run_pipeline([ScopeBatch(name="today", records=outline_records)], categories)
        assert [item.record.id for item in results] == ["r1", "r2", "r3"]

    def test_max_depth_override(self, work_category):
        records = [
            Record(id="root", text="#work"),
            Record(id="mid", text="mid", parent_id="root"),
            Record(id="leaf", text="09:00-10:00", parent_id="mid"),
        ]
        scopes = [ScopeBatch(name="d", records=records)]
        assert len(run_pipeline(scopes, [work_category], max_depth=2)) == 1
        assert run_pipeline(scopes, [work_category], max_depth=1) == []
