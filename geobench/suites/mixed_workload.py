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

"""Mixed read/write workload benchmarks simulating realistic load."""

import logging
import uuid

from geobench.suite import Case, CaseResult, ExecutionContext, Suite
from geobench.suites.common import random_amsterdam_bbox, random_netherlands_point
from geobench.workload import WorkloadOperation, run_mixed_workload

logger = logging.getLogger(__name__)

CONCURRENCY = 10
TOTAL_OPERATIONS = 500

# Rows inserted by this suite carry this name prefix so teardown can find them
NAME_PREFIX = "mixed_"

READ_SQL = {
    "postgis": """
        SELECT id, name FROM geo_features
        WHERE ST_Intersects(geom, ST_MakeEnvelope($1, $2, $3, $4, 4326))
    """,
    "duckdb": """
        SELECT id, name FROM geo_features
        WHERE ST_Intersects(geom, ST_MakeEnvelope($1, $2, $3, $4))
    """,
}

WRITE_SQL = {
    "postgis": """
        INSERT INTO geo_features (name, category, properties, geom)
        VALUES ($1, 'point', '{}', ST_SetSRID(ST_MakePoint($2, $3), 4326))
    """,
    "duckdb": """
        INSERT INTO geo_features (name, category, properties, geom)
        VALUES ($1, 'point', '{}', ST_Point($2, $3))
    """,
}

CLEANUP_SQL = f"DELETE FROM geo_features WHERE name LIKE '{NAME_PREFIX}%'"


def read_operation() -> WorkloadOperation:
    params = random_amsterdam_bbox().as_params()

    async def operation(ctx: ExecutionContext) -> int:
        rows = await ctx.connection.fetch(READ_SQL[ctx.target], *params)
        return len(rows)

    return operation


def write_operation() -> WorkloadOperation:
    name = f"{NAME_PREFIX}{uuid.uuid4().hex}"
    lon, lat = random_netherlands_point()

    async def operation(ctx: ExecutionContext) -> int:
        return await ctx.connection.execute(WRITE_SQL[ctx.target], name, lon, lat)

    return operation


def mixed_case(name: str, write_ratio: float, description: str) -> Case:
    async def operation(ctx: ExecutionContext) -> CaseResult:
        result = await run_mixed_workload(
            read_operation,
            write_operation,
            ctx,
            total_operations=TOTAL_OPERATIONS,
            concurrency=CONCURRENCY,
            write_ratio=write_ratio,
            timeout_seconds=ctx.timeout_seconds,
        )
        logger.debug(f"{name}: {result.reads} reads, {result.writes} writes")
        return result.as_case_result()

    return Case(
        name=name,
        operation=operation,
        description=description,
        per_operation_timeout=True,
    )


async def remove_inserted_rows(ctx: ExecutionContext) -> None:
    deleted = await ctx.connection.execute(CLEANUP_SQL)
    logger.info(f"Removed {deleted} rows inserted by mixed workloads on {ctx.target}")


suite = Suite(
    name="mixed-workload",
    description="Mixed read/write workload benchmarks - simulates realistic load",
    targets=("postgis", "duckdb"),
    cases=[
        mixed_case("mixed-80read-20write", 0.2, "500 ops: 80% reads (intersects) + 20% writes (inserts)"),
        mixed_case("mixed-50read-50write", 0.5, "500 ops: 50% reads + 50% writes"),
        mixed_case("mixed-95read-5write", 0.05, "500 ops: 95% reads + 5% writes (read-heavy)"),
    ],
    teardown=remove_inserted_rows,
)
