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
Tests for the case executor.

Operations are plain async callables, so no database is needed here.
"""

import asyncio

import pytest

from geobench.executor import describe_error, run_case
from geobench.suite import CaseResult, ExecutionContext

CTX = ExecutionContext(target="postgis", scale=5000, connection=object())


def counting_operation(result: CaseResult = CaseResult(rows_returned=3)):
    """Operation that counts its calls and returns a fixed result."""
    calls = []

    async def operation(ctx):
        calls.append(ctx)
        return result

    return operation, calls


async def failing_operation(ctx):
    raise RuntimeError("relation \"geo_features\" does not exist")


async def run(operation, warmup=0, timed=1, timeout=None, context=CTX):
    return await run_case(
        operation,
        context,
        run_id="run-1",
        suite="bbox",
        case="bbox-amsterdam",
        warmup_iterations=warmup,
        timed_iterations=timed,
        timeout_seconds=timeout,
    )


class TestRunCase:
    """Tests for run_case()."""

    @pytest.mark.asyncio
    async def test_warmup_and_timed_call_counts(self):
        """warmup=2, timed=3 calls the operation 5 times and records 3."""
        operation, calls = counting_operation()

        records = await run(operation, warmup=2, timed=3)

        assert len(calls) == 5
        assert [r.iteration for r in records] == [1, 2, 3]
        assert all(r.rows_returned == 3 for r in records)
        assert all(r.error is None for r in records)

    @pytest.mark.asyncio
    async def test_records_carry_identity(self):
        """Every record carries run, suite, case, target and scale."""
        operation, _ = counting_operation()

        (record,) = await run(operation)

        assert record.run_id == "run-1"
        assert record.suite == "bbox"
        assert record.case == "bbox-amsterdam"
        assert record.target == "postgis"
        assert record.scale == 5000
        assert record.elapsed_ms >= 0
        assert record.timestamp

    @pytest.mark.asyncio
    async def test_captures_plan_and_failed_operations(self):
        operation, _ = counting_operation(
            CaseResult(rows_returned=10, query_plan="Seq Scan", failed_operations=2)
        )

        (record,) = await run(operation)

        assert record.query_plan == "Seq Scan"
        assert record.failed_operations == 2

    @pytest.mark.asyncio
    async def test_failing_operation_yields_error_records(self):
        """Failures become records with an error and zero rows; nothing raises."""
        records = await run(failing_operation, warmup=1, timed=4)

        assert len(records) == 4
        assert all(r.error == 'relation "geo_features" does not exist' for r in records)
        assert all(r.rows_returned == 0 for r in records)
        assert all(r.query_plan is None for r in records)
        assert all(r.elapsed_ms >= 0 for r in records)

    @pytest.mark.asyncio
    async def test_empty_message_uses_exception_name(self):
        async def operation(ctx):
            raise KeyError()

        (record,) = await run(operation)

        assert record.error == "KeyError"

    @pytest.mark.asyncio
    async def test_warmup_failures_are_discarded(self):
        """A failing warmup does not affect the timed iterations."""
        attempts = []

        async def flaky(ctx):
            attempts.append(1)
            if len(attempts) == 1:
                raise ConnectionError("cold start")
            return CaseResult(rows_returned=1)

        records = await run(flaky, warmup=1, timed=2)

        assert [r.error for r in records] == [None, None]

    @pytest.mark.asyncio
    async def test_zero_timed_iterations(self):
        operation, calls = counting_operation()

        records = await run(operation, warmup=2, timed=0)

        assert records == []
        assert len(calls) == 2

    @pytest.mark.asyncio
    async def test_timeout_becomes_error_record(self):
        async def slow(ctx):
            await asyncio.sleep(5)
            return CaseResult(rows_returned=1)

        (record,) = await run(slow, timeout=0.01)

        assert record.error == "Operation timed out after 0.01s"
        assert record.rows_returned == 0

    @pytest.mark.asyncio
    async def test_driver_timeout_without_configured_timeout(self):
        """A TimeoutError raised by the driver itself is not attributed to a runner timeout."""

        async def driver_timeout(ctx):
            raise asyncio.TimeoutError()

        (record,) = await run(driver_timeout)

        assert record.error == "Operation timed out"
        assert record.rows_returned == 0

    @pytest.mark.asyncio
    async def test_missing_context_raises(self):
        operation, _ = counting_operation()
        with pytest.raises(ValueError, match="context"):
            await run(operation, context=None)

    @pytest.mark.asyncio
    async def test_negative_iterations_raise(self):
        operation, _ = counting_operation()
        with pytest.raises(ValueError, match="non-negative"):
            await run(operation, timed=-1)

    @pytest.mark.asyncio
    async def test_non_callable_operation_raises(self):
        with pytest.raises(ValueError, match="not callable"):
            await run("SELECT 1")


class TestDescribeError:
    """Tests for describe_error()."""

    def test_uses_message(self):
        assert describe_error(ValueError("bad geometry")) == "bad geometry"

    def test_falls_back_to_class_name(self):
        assert describe_error(RuntimeError()) == "RuntimeError"

    def test_timeout(self):
        assert describe_error(asyncio.TimeoutError()) == "Operation timed out"
