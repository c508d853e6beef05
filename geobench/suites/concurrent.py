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
Concurrent query benchmarks: many simultaneous random bbox intersects.

One timed iteration is a whole batch; the recorded elapsed time is the wall
clock for the batch and rows_returned is the sum over all queries.
"""

import random
from typing import Iterable, Optional

from geobench.suite import Case, CaseResult, ExecutionContext, Suite
from geobench.suites.common import random_amsterdam_bbox
from geobench.workload import WorkloadOperation, run_uniform_workload

DEFAULT_LEVELS = (5, 10, 25, 50)

# Levels at or above this run a larger batch so each worker stays busy
LARGE_LEVEL = 50
BATCH_SIZE = 100
LARGE_BATCH_SIZE = 200

INTERSECTS = {
    "postgis": """
        SELECT id, name FROM geo_features
        WHERE ST_Intersects(geom, ST_MakeEnvelope($1, $2, $3, $4, 4326))
    """,
    "duckdb": """
        SELECT id, name FROM geo_features
        WHERE ST_Intersects(geom, ST_MakeEnvelope($1, $2, $3, $4))
    """,
}


def random_intersects(rng: Optional[random.Random] = None) -> WorkloadOperation:
    """One intersects query against a freshly drawn Amsterdam bbox."""
    params = random_amsterdam_bbox(rng).as_params()

    async def operation(ctx: ExecutionContext) -> int:
        rows = await ctx.connection.fetch(INTERSECTS[ctx.target], *params)
        return len(rows)

    return operation


def batch_size(concurrency: int) -> int:
    return LARGE_BATCH_SIZE if concurrency >= LARGE_LEVEL else BATCH_SIZE


def concurrent_case(concurrency: int) -> Case:
    total = batch_size(concurrency)

    async def operation(ctx: ExecutionContext) -> CaseResult:
        result = await run_uniform_workload(
            random_intersects,
            ctx,
            total_operations=total,
            concurrency=concurrency,
            timeout_seconds=ctx.timeout_seconds,
        )
        return result.as_case_result()

    return Case(
        name=f"concurrent-intersects-c{concurrency}",
        operation=operation,
        description=f"{total} random intersects queries at concurrency {concurrency}",
        per_operation_timeout=True,
    )


def build_suite(levels: Iterable[int] = DEFAULT_LEVELS) -> Suite:
    """Build the concurrent suite with one case per concurrency level."""
    return Suite(
        name="concurrent",
        description="Concurrent query performance - multiple simultaneous spatial queries",
        targets=("postgis", "duckdb"),
        cases=[concurrent_case(level) for level in sorted(set(levels))],
    )


suite = build_suite()
