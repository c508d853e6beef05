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
Bulk import benchmarks: one multi-row INSERT of random features per call.

Every imported row is named with the import_ prefix so the teardown can
remove them again; rows_returned is the number of rows inserted.
"""

import logging
import random
from typing import Callable, Optional

from geobench.suite import Case, CaseResult, ExecutionContext, Suite
from geobench.suites.common import (
    BBox,
    NL_MAX_LAT,
    NL_MAX_LON,
    NL_MIN_LAT,
    NL_MIN_LON,
    random_netherlands_point,
)

logger = logging.getLogger(__name__)

NAME_PREFIX = "import_"

# Keeps every generated polygon inside the Netherlands bounds
POLYGON_MARGIN = 0.1

INSERT_SQL = "INSERT INTO geo_features (name, category, properties, geom) VALUES "

POINT_GEOMETRY = {
    "postgis": "ST_SetSRID(ST_MakePoint({lon}, {lat}), 4326)",
    "duckdb": "ST_Point({lon}, {lat})",
}

POLYGON_GEOMETRY = {
    "postgis": "ST_SetSRID(ST_GeomFromText('{wkt}'), 4326)",
    "duckdb": "ST_GeomFromText('{wkt}')",
}

CLEANUP_SQL = f"DELETE FROM geo_features WHERE name LIKE '{NAME_PREFIX}%'"

RowBuilder = Callable[[str, int, random.Random], str]


def point_row(target: str, i: int, rng: random.Random) -> str:
    lon, lat = random_netherlands_point(rng)
    geom = POINT_GEOMETRY[target].format(lon=lon, lat=lat)
    return f"('{NAME_PREFIX}{i}', 'point', '{{}}', {geom})"


def polygon_row(target: str, i: int, rng: random.Random) -> str:
    lon = NL_MIN_LON + rng.random() * (NL_MAX_LON - NL_MIN_LON - POLYGON_MARGIN)
    lat = NL_MIN_LAT + rng.random() * (NL_MAX_LAT - NL_MIN_LAT - POLYGON_MARGIN)
    size = 0.01 + rng.random() * 0.05
    wkt = BBox(lon, lat, lon + size, lat + size).to_wkt()
    geom = POLYGON_GEOMETRY[target].format(wkt=wkt)
    return f"('{NAME_PREFIX}poly_{i}', 'polygon', '{{}}', {geom})"


def batch_insert_sql(
    target: str,
    batch_size: int,
    row: RowBuilder = point_row,
    rng: Optional[random.Random] = None,
) -> str:
    """Build one INSERT statement carrying batch_size freshly drawn features."""
    r = rng or random.Random()
    values = ",\n".join(row(target, i, r) for i in range(batch_size))
    return INSERT_SQL + values


def batch_insert_case(
    name: str, description: str, batch_size: int, row: RowBuilder = point_row
) -> Case:
    async def operation(ctx: ExecutionContext) -> CaseResult:
        sql = batch_insert_sql(ctx.target, batch_size, row)
        inserted = await ctx.connection.execute(sql)
        return CaseResult(rows_returned=inserted)

    return Case(name=name, operation=operation, description=description)


async def remove_imported_rows(ctx: ExecutionContext) -> None:
    deleted = await ctx.connection.execute(CLEANUP_SQL)
    logger.info(f"Removed {deleted} imported rows on {ctx.target}")


suite = Suite(
    name="import",
    description="Bulk import speed - batch INSERT of GeoJSON features",
    targets=("postgis", "duckdb"),
    cases=[
        batch_insert_case("batch-insert-100", "Insert 100 random point features", 100),
        batch_insert_case("batch-insert-1000", "Insert 1000 random point features", 1000),
        batch_insert_case(
            "batch-insert-polygon-100",
            "Insert 100 random polygon features",
            100,
            row=polygon_row,
        ),
    ],
    teardown=remove_imported_rows,
)
