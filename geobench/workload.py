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
Concurrency-Controlled Workload Driver

Dispatches a batch of independent operations against one target with at most
``concurrency`` of them in flight. Used by the "concurrent" and
"mixed-workload" suites, where a single timed iteration is a whole batch.

Two dispatch modes are supported:

- Uniform: the same kind of operation with pre-generated parameters
  (e.g., 100 random bounding-box intersects).
- Mixed: every slot is independently drawn as a read or a write with
  probability ``write_ratio`` of being a write.

Admission is FIFO: a fixed pool of workers pulls the next queued operation as
soon as its previous one finishes, so a slow operation never holds back a
whole "batch". A failing operation does not cancel its siblings; failures are
counted and reported alongside the row total.
"""

import asyncio
import logging
import random
from collections import deque
from dataclasses import dataclass
from typing import Awaitable, Callable, Optional

from geobench.errors import WorkloadError
from geobench.executor import describe_error
from geobench.suite import CaseResult, ExecutionContext

logger = logging.getLogger(__name__)

# An operation dispatched by the driver returns the rows it returned or affected.
WorkloadOperation = Callable[[ExecutionContext], Awaitable[int]]
OperationFactory = Callable[[], WorkloadOperation]

READ = "read"
WRITE = "write"


@dataclass(frozen=True)
class WorkloadResult:
    """Aggregate outcome of one workload dispatch.

    Attributes:
        total_rows_affected: Sum of rows over all successful operations
        completed: Operations that succeeded
        failed: Operations that raised or timed out
        reads: Slots dispatched as reads (mixed mode only)
        writes: Slots dispatched as writes (mixed mode only)
        first_error: Message of the first failure observed, if any
    """

    total_rows_affected: int = 0
    completed: int = 0
    failed: int = 0
    reads: int = 0
    writes: int = 0
    first_error: Optional[str] = None

    @property
    def total_operations(self) -> int:
        return self.completed + self.failed

    def as_case_result(self) -> CaseResult:
        """Convert to a CaseResult for the case executor.

        Raises:
            WorkloadError: If the workload was non-empty and nothing succeeded
        """
        if self.total_operations > 0 and self.completed == 0:
            raise WorkloadError(
                f"All {self.failed} operations failed; first error: {self.first_error}"
            )
        return CaseResult(
            rows_returned=self.total_rows_affected,
            failed_operations=self.failed,
        )


@dataclass
class _Tally:
    """Counters owned by a single worker; summed by the coordinator."""

    rows: int = 0
    completed: int = 0
    failed: int = 0
    first_error: Optional[str] = None


def _validate(total_operations: int, concurrency: int) -> None:
    if total_operations < 0:
        raise ValueError(f"total_operations must be >= 0, got {total_operations}")
    if concurrency < 1:
        raise ValueError(f"concurrency must be >= 1, got {concurrency}")


async def _worker(
    queue: "deque[WorkloadOperation]",
    context: ExecutionContext,
    timeout_seconds: Optional[float],
) -> _Tally:
    tally = _Tally()
    while queue:
        operation = queue.popleft()
        try:
            if timeout_seconds is None:
                rows = await operation(context)
            else:
                rows = await asyncio.wait_for(operation(context), timeout=timeout_seconds)
        except Exception as e:
            tally.failed += 1
            if tally.first_error is None:
                tally.first_error = describe_error(e)
            continue
        tally.rows += rows or 0
        tally.completed += 1
    return tally


async def dispatch(
    operations: list[WorkloadOperation],
    context: ExecutionContext,
    concurrency: int,
    timeout_seconds: Optional[float] = None,
) -> WorkloadResult:
    """Run operations with at most ``concurrency`` in flight.

    Returns once every operation has completed (successfully or not).
    """
    _validate(len(operations), concurrency)
    if not operations:
        return WorkloadResult()

    queue: deque[WorkloadOperation] = deque(operations)
    workers = min(concurrency, len(operations))
    tallies = await asyncio.gather(
        *(_worker(queue, context, timeout_seconds) for _ in range(workers))
    )

    first_error = next((t.first_error for t in tallies if t.first_error), None)
    result = WorkloadResult(
        total_rows_affected=sum(t.rows for t in tallies),
        completed=sum(t.completed for t in tallies),
        failed=sum(t.failed for t in tallies),
        first_error=first_error,
    )

    if result.failed:
        logger.warning(
            f"{result.failed}/{result.total_operations} workload operations failed "
            f"on {context.target} (first error: {first_error})"
        )
    return result


async def run_uniform_workload(
    operation_factory: OperationFactory,
    context: ExecutionContext,
    *,
    total_operations: int,
    concurrency: int,
    timeout_seconds: Optional[float] = None,
) -> WorkloadResult:
    """Dispatch total_operations instances of one kind of operation.

    All parameter instances are generated up front by calling
    ``operation_factory()`` once per slot.
    """
    _validate(total_operations, concurrency)
    operations = [operation_factory() for _ in range(total_operations)]
    return await dispatch(operations, context, concurrency, timeout_seconds)


def plan_mixed_slots(
    total_operations: int,
    write_ratio: float,
    rng: Optional[random.Random] = None,
) -> list[str]:
    """Decide independently for every slot whether it is a read or a write."""
    if not 0.0 <= write_ratio <= 1.0:
        raise ValueError(f"write_ratio must be between 0 and 1, got {write_ratio}")
    draw = (rng or random).random
    return [WRITE if draw() < write_ratio else READ for _ in range(total_operations)]


async def run_mixed_workload(
    read_factory: OperationFactory,
    write_factory: OperationFactory,
    context: ExecutionContext,
    *,
    total_operations: int,
    concurrency: int,
    write_ratio: float,
    rng: Optional[random.Random] = None,
    timeout_seconds: Optional[float] = None,
) -> WorkloadResult:
    """Dispatch a read/write blend with bounded concurrency.

    Args:
        read_factory: Builds one read operation with fresh parameters
        write_factory: Builds one write operation with fresh parameters
        context: Target context shared by every operation
        total_operations: Number of slots
        concurrency: Maximum operations in flight
        write_ratio: Probability that a slot is a write (0 = reads only, 1 = writes only)
        rng: Random source for the slot draw; module-level random if omitted
        timeout_seconds: Optional per-operation timeout

    Returns:
        WorkloadResult with row totals summed across reads and writes
    """
    _validate(total_operations, concurrency)
    slots = plan_mixed_slots(total_operations, write_ratio, rng)
    operations = [write_factory() if slot == WRITE else read_factory() for slot in slots]
    writes = slots.count(WRITE)

    result = await dispatch(operations, context, concurrency, timeout_seconds)
    return WorkloadResult(
        total_rows_affected=result.total_rows_affected,
        completed=result.completed,
        failed=result.failed,
        reads=len(slots) - writes,
        writes=writes,
        first_error=result.first_error,
    )
