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
Case Executor

Runs one benchmark case against one execution context: warmup iterations
first (results and errors discarded), then timed iterations, strictly one
after another. Every timed iteration yields exactly one MeasurementRecord,
whether the operation succeeded or not.

Persisting the records is left to the caller.
"""

import asyncio
import logging
from typing import Optional

from geobench.records import MeasurementRecord, utc_now
from geobench.suite import CaseResult, ExecutionContext, Operation
from geobench.target_base import TimedExecution

logger = logging.getLogger(__name__)


def describe_error(exc: BaseException) -> str:
    """Return a non-empty, human-readable message for an exception."""
    if isinstance(exc, asyncio.TimeoutError):
        return "Operation timed out"
    message = str(exc)
    return message if message else type(exc).__name__


async def invoke(
    operation: Operation,
    context: ExecutionContext,
    timeout_seconds: Optional[float] = None,
) -> CaseResult:
    """Await one operation call, optionally bounded by a timeout.

    Raises:
        asyncio.TimeoutError: If timeout_seconds elapses first
    """
    if timeout_seconds is None:
        return await operation(context)
    return await asyncio.wait_for(operation(context), timeout=timeout_seconds)


async def run_case(
    operation: Operation,
    context: ExecutionContext,
    *,
    run_id: str,
    suite: str,
    case: str,
    warmup_iterations: int,
    timed_iterations: int,
    timeout_seconds: Optional[float] = None,
) -> list[MeasurementRecord]:
    """Execute a benchmark case with warmup and timed iterations.

    Args:
        operation: Async callable under test
        context: Target, scale and connection to run against
        run_id: Identifier stamped on every record
        suite: Suite name stamped on every record
        case: Case name stamped on every record
        warmup_iterations: Discarded runs before measurement starts
        timed_iterations: Measured runs; one record each
        timeout_seconds: Optional per-call timeout; a timeout counts as a failure

    Returns:
        Exactly timed_iterations records, in execution order

    Raises:
        ValueError: If the context is missing, the operation is not callable,
            or an iteration count is negative
    """
    if context is None:
        raise ValueError("An execution context is required")
    if not callable(operation):
        raise ValueError(f"Operation for case '{case}' is not callable")
    if warmup_iterations < 0 or timed_iterations < 0:
        raise ValueError(
            f"Iteration counts must be non-negative "
            f"(warmup={warmup_iterations}, timed={timed_iterations})"
        )

    for i in range(warmup_iterations):
        try:
            await invoke(operation, context, timeout_seconds)
        except Exception as e:
            logger.debug(f"Warmup {i + 1}/{warmup_iterations} of {case} failed: {describe_error(e)}")

    records: list[MeasurementRecord] = []

    for iteration in range(1, timed_iterations + 1):
        rows_returned = 0
        query_plan: Optional[str] = None
        failed_operations: Optional[int] = None
        error: Optional[str] = None

        with TimedExecution() as timer:
            try:
                result = await invoke(operation, context, timeout_seconds)
                rows_returned = result.rows_returned
                query_plan = result.query_plan
                failed_operations = result.failed_operations
            except Exception as e:
                error = describe_error(e)
                if isinstance(e, asyncio.TimeoutError) and timeout_seconds is not None:
                    error = f"Operation timed out after {timeout_seconds}s"

        if error is not None:
            logger.debug(f"{suite}/{case} iteration {iteration} failed: {error}")

        records.append(
            MeasurementRecord(
                run_id=run_id,
                suite=suite,
                case=case,
                target=context.target,
                scale=context.scale,
                iteration=iteration,
                elapsed_ms=timer.elapsed_ms,
                rows_returned=rows_returned if error is None else 0,
                query_plan=query_plan if error is None else None,
                error=error,
                timestamp=utc_now(),
                failed_operations=failed_operations,
            )
        )

    return records
