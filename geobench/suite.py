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
Benchmark Suite Contract

A suite is a named collection of cases sharing a domain theme. Each case wraps
an *operation*: any async callable that accepts an ExecutionContext and
returns a CaseResult. Nothing has to subclass anything:

    async def count_features(ctx: ExecutionContext) -> CaseResult:
        rows = await ctx.connection.fetch("SELECT id FROM geo_features")
        return CaseResult(rows_returned=len(rows))

    suite = Suite(
        name="smoke",
        targets=("postgis", "duckdb"),
        cases=[Case("count-features", count_features)],
    )

Suites are registered in geobench/suites/__init__.py.
"""

from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Optional


@dataclass(frozen=True)
class ExecutionContext:
    """Everything an operation needs for one suite x target x scale run.

    Attributes:
        target: Target identifier (e.g., "postgis")
        scale: Dataset size the suite is run under
        connection: Open target handle (a BenchmarkTarget); shared, never replaced
        timeout_seconds: Optional per-operation timeout for workload operations
    """

    target: str
    scale: int
    connection: Any
    timeout_seconds: Optional[float] = None


@dataclass(frozen=True)
class CaseResult:
    """Outcome of one successful operation call.

    Attributes:
        rows_returned: Rows returned or affected
        query_plan: Optional plan text captured by the operation
        failed_operations: For workload cases, how many dispatched operations failed
    """

    rows_returned: int
    query_plan: Optional[str] = None
    failed_operations: Optional[int] = None


Operation = Callable[[ExecutionContext], Awaitable[CaseResult]]
Hook = Callable[[ExecutionContext], Awaitable[None]]


@dataclass(frozen=True)
class Case:
    """A single named operation within a suite.

    A case with per_operation_timeout set applies the context timeout to each
    call it dispatches, so the executor does not also bound the whole iteration.
    """

    name: str
    operation: Operation
    description: str = ""
    per_operation_timeout: bool = False


@dataclass
class Suite:
    """A named collection of cases and the targets they can run against.

    Attributes:
        name: Unique suite name (e.g., "point-in-polygon")
        targets: Target identifiers the suite supports
        cases: Ordered cases to run
        description: Human-readable description
        setup: Optional hook run once before all cases for a target/scale pair
        teardown: Optional hook run once after all cases for a target/scale pair
    """

    name: str
    targets: tuple[str, ...]
    cases: list[Case] = field(default_factory=list)
    description: str = ""
    setup: Optional[Hook] = None
    teardown: Optional[Hook] = None

    def supports(self, target: str) -> bool:
        return target in self.targets
