#  Licensed to the Apache Software Foundation (ASF) under one
#  or more contributor license agreements.  See the NOTICE file
#  distributed with this work for additional information
#  regarding copyright ownership.  The ASF licenses this file
#  to you under the Apache License, Version 2.0 (the
#  "License"); you may not use this file except in compliance
#  with the License.  You may obtain a copy of the License at
#
#    http://www.apache.org/licenses/LICENSE-2.0
#
#  Unless required by applicable law or agreed to in writing,
#  software distributed under the License is distributed on an
#  "AS IS" BASIS, WITHOUT WARRANTIES OR CONDITIONS OF ANY
#  KIND, either express or implied.  See the License for the
#  specific language governing permissions and limitations
#  under the License.

"""
Tests for the run orchestrator using in-memory fake targets.
"""

import asyncio

import pytest

from geobench.config import RunnerConfig
from geobench.errors import InfrastructureError, SuiteSetupError, TargetUnavailableError
from geobench.orchestrator import RunOrchestrator, format_case_summary
from geobench.records import MeasurementRecord
from geobench.results_store import ResultsStore
from geobench.sampler import ResourceUsage
from geobench.suite import Case, CaseResult, Suite
from geobench.target_base import BenchmarkTarget


class FakeTarget(BenchmarkTarget):
    """Target that answers every query with a fixed number of rows."""

    def __init__(self, target_name, rows=4, fail_connect=False):
        self._name = target_name
        self.rows = rows
        self.fail_connect = fail_connect
        self.connected = False
        self.closed = False

    @property
    def name(self):
        return self._name

    @property
    def dialect(self):
        return self._name.upper()

    async def connect(self):
        if self.fail_connect:
            raise TargetUnavailableError(f"{self._name} is down")
        self.connected = True

    async def fetch(self, sql, *params):
        return [(i,) for i in range(self.rows)]

    async def execute(self, sql, *params):
        return 1

    async def close(self):
        self.closed = True


class FakeMonitor:
    def snapshot(self, resource):
        return ResourceUsage(1.0, 2.0, 3.0, 4, 5)


async def fetch_rows(ctx):
    rows = await ctx.connection.fetch("SELECT 1")
    return CaseResult(rows_returned=len(rows))


async def always_fails(ctx):
    raise RuntimeError("function st_foo does not exist")


def make_config(**overrides):
    values = dict(
        targets=["postgis", "duckdb"],
        scales=[100],
        iterations=3,
        warmup_iterations=1,
        collect_resource_stats=False,
    )
    values.update(overrides)
    return RunnerConfig(**values)


class Harness:
    """Builds an orchestrator with fake targets and an on-disk store."""

    def __init__(self, tmp_path, config, suites, **target_kwargs):
        self.store = ResultsStore(tmp_path / "bench.db").open()
        self.targets = {}
        self.target_kwargs = target_kwargs

        def factory(name):
            target = FakeTarget(name, **self.target_kwargs.get(name, {}))
            self.targets[name] = target
            return target

        self.orchestrator = RunOrchestrator(
            config, self.store, suites, target_factory=factory, monitor=FakeMonitor()
        )

    async def run(self):
        return await self.orchestrator.run()


@pytest.fixture
def harness_factory(tmp_path):
    harnesses = []

    def make(config, suites, **target_kwargs):
        harness = Harness(tmp_path, config, suites, **target_kwargs)
        harnesses.append(harness)
        return harness

    yield make
    for harness in harnesses:
        harness.store.close()


class TestRunOrchestrator:
    """Tests for RunOrchestrator.run()."""

    @pytest.mark.asyncio
    async def test_records_every_iteration(self, harness_factory):
        suite = Suite("smoke", ("postgis", "duckdb"), [Case("count", fetch_rows)])
        config = make_config(scales=[100, 200])
        h = harness_factory(config, [suite])

        run_id = await h.run()

        records = h.store.get_measurements(run_id)
        # 2 targets x 2 scales x 3 iterations
        assert len(records) == 12
        assert {(r.target, r.scale) for r in records} == {
            ("postgis", 100), ("postgis", 200), ("duckdb", 100), ("duckdb", 200),
        }
        assert all(r.rows_returned == 4 for r in records)

    @pytest.mark.asyncio
    async def test_run_finished_and_config_stored(self, harness_factory):
        suite = Suite("smoke", ("postgis",), [Case("count", fetch_rows)])
        config = make_config(targets=["postgis"])
        h = harness_factory(config, [suite])

        run_id = await h.run()

        run = h.store.get_run(run_id)
        assert run.is_complete
        assert run.config["iterations"] == 3
        assert h.targets["postgis"].closed

    @pytest.mark.asyncio
    async def test_unsupported_target_skipped(self, harness_factory):
        pg_only = Suite("indexing", ("postgis",), [Case("size", fetch_rows)])
        h = harness_factory(make_config(), [pg_only])

        run_id = await h.run()

        assert {r.target for r in h.store.get_measurements(run_id)} == {"postgis"}
        # No selected suite needs duckdb, so it is never opened
        assert "duckdb" not in h.targets

    @pytest.mark.asyncio
    async def test_case_failure_does_not_abort(self, harness_factory):
        suite = Suite(
            "mixed",
            ("postgis",),
            [Case("broken", always_fails), Case("count", fetch_rows)],
        )
        h = harness_factory(make_config(targets=["postgis"]), [suite])

        run_id = await h.run()

        records = h.store.get_measurements(run_id)
        broken = [r for r in records if r.case == "broken"]
        assert len(broken) == 3
        assert all(r.error for r in broken)
        assert [a.case for a in h.store.query_stats_for_run(run_id)] == ["count"]

    @pytest.mark.asyncio
    async def test_connect_failure_is_fatal_but_finalizes(self, harness_factory):
        suite = Suite("smoke", ("postgis", "duckdb"), [Case("count", fetch_rows)])
        h = harness_factory(make_config(), [suite], duckdb={"fail_connect": True})

        with pytest.raises(TargetUnavailableError):
            await h.run()

        run_id = h.orchestrator.run_id
        assert h.store.get_run(run_id).is_complete
        assert h.targets["postgis"].closed
        assert h.store.get_measurements(run_id) == []

    @pytest.mark.asyncio
    async def test_setup_and_teardown_called_per_combination(self, harness_factory):
        calls = []

        async def setup(ctx):
            calls.append(("setup", ctx.target, ctx.scale))

        async def teardown(ctx):
            calls.append(("teardown", ctx.target, ctx.scale))

        suite = Suite("smoke", ("postgis",), [Case("count", fetch_rows)], setup=setup, teardown=teardown)
        h = harness_factory(make_config(targets=["postgis"], scales=[1, 2]), [suite])

        await h.run()

        assert calls == [
            ("setup", "postgis", 1), ("teardown", "postgis", 1),
            ("setup", "postgis", 2), ("teardown", "postgis", 2),
        ]

    @pytest.mark.asyncio
    async def test_teardown_failure_is_not_fatal(self, harness_factory):
        async def teardown(ctx):
            raise RuntimeError("cleanup failed")

        first = Suite("first", ("postgis",), [Case("count", fetch_rows)], teardown=teardown)
        second = Suite("second", ("postgis",), [Case("count", fetch_rows)])
        h = harness_factory(make_config(targets=["postgis"]), [first, second])

        run_id = await h.run()

        assert {r.suite for r in h.store.get_measurements(run_id)} == {"first", "second"}
        assert h.store.get_run(run_id).is_complete

    @pytest.mark.asyncio
    async def test_setup_failure_is_fatal(self, harness_factory):
        async def setup(ctx):
            raise RuntimeError("cannot prepare table")

        suite = Suite("smoke", ("postgis",), [Case("count", fetch_rows)], setup=setup)
        h = harness_factory(make_config(targets=["postgis"]), [suite])

        with pytest.raises(SuiteSetupError, match="cannot prepare table") as excinfo:
            await h.run()

        assert isinstance(excinfo.value, InfrastructureError)
        assert isinstance(excinfo.value.__cause__, RuntimeError)
        assert h.store.get_run(h.orchestrator.run_id).is_complete
        assert h.targets["postgis"].closed

    @pytest.mark.asyncio
    async def test_timeout_reaches_execution_context(self, harness_factory):
        seen = []

        async def record_timeout(ctx):
            seen.append(ctx.timeout_seconds)
            return CaseResult(rows_returned=1)

        suite = Suite("smoke", ("postgis",), [Case("timeout", record_timeout)])
        h = harness_factory(make_config(targets=["postgis"], timeout_seconds=2.5), [suite])

        await h.run()

        assert seen == [2.5] * 4

    @pytest.mark.asyncio
    async def test_per_operation_timeout_case_not_bounded_as_a_whole(self, harness_factory):
        """Only plain cases get the executor's timeout around the whole call."""

        async def slow_batch(ctx):
            await asyncio.sleep(0.05)
            return CaseResult(rows_returned=1, failed_operations=0)

        suite = Suite(
            "smoke",
            ("postgis",),
            [
                Case("plain", slow_batch),
                Case("workload", slow_batch, per_operation_timeout=True),
            ],
        )
        config = make_config(targets=["postgis"], iterations=1, warmup_iterations=0, timeout_seconds=0.01)
        h = harness_factory(config, [suite])

        run_id = await h.run()

        errors = {r.case: r.error for r in h.store.get_measurements(run_id)}
        assert errors == {"plain": "Operation timed out after 0.01s", "workload": None}

    @pytest.mark.asyncio
    async def test_resource_snapshots_stored(self, harness_factory):
        suite = Suite("smoke", ("postgis",), [Case("count", fetch_rows)])
        config = make_config(
            targets=["postgis"],
            collect_resource_stats=True,
            monitored_resources=["bench-postgis"],
            sample_interval_seconds=60.0,
        )
        h = harness_factory(config, [suite])

        run_id = await h.run()

        snapshots = h.store.get_resource_snapshots(run_id)
        assert len(snapshots) >= 1
        assert snapshots[0].resource == "bench-postgis"


class TestFormatCaseSummary:
    """Tests for the per-case progress line."""

    def record(self, elapsed, error=None):
        return MeasurementRecord(
            run_id="r", suite="s", case="c", target="postgis", scale=1,
            iteration=1, elapsed_ms=elapsed, error=error,
        )

    def test_success_line(self):
        line = format_case_summary("c", [self.record(v) for v in (10, 20, 30)])
        assert line.startswith("  [✓] c: p50=20.00ms")
        assert "errors" not in line

    def test_partial_errors_noted(self):
        line = format_case_summary("c", [self.record(10), self.record(0, error="x")])
        assert "(1/2 errors)" in line

    def test_all_failed(self):
        line = format_case_summary("c", [self.record(0, error="x")] * 3)
        assert line == "  [✗] c: FAILED (3/3 errors)"
