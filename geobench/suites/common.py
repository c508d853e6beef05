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
Shared helpers for suite definitions: per-target query selection and the
random geometry used by the workload suites.

All coordinates are WGS84 lon/lat around the Netherlands, matching the
generated geo_features dataset.
"""

import random
from dataclasses import dataclass
from typing import Any, Optional, Sequence

from geobench.suite import Case, CaseResult, ExecutionContext

# lon/lat bounds of the Netherlands
NL_MIN_LON, NL_MIN_LAT, NL_MAX_LON, NL_MAX_LAT = 3.37, 50.75, 7.21, 53.47


@dataclass(frozen=True)
class BBox:
    min_lon: float
    min_lat: float
    max_lon: float
    max_lat: float

    def as_params(self) -> tuple[float, float, float, float]:
        return (self.min_lon, self.min_lat, self.max_lon, self.max_lat)

    def to_wkt(self) -> str:
        return (
            f"POLYGON(({self.min_lon} {self.min_lat}, {self.max_lon} {self.min_lat}, "
            f"{self.max_lon} {self.max_lat}, {self.min_lon} {self.max_lat}, "
            f"{self.min_lon} {self.min_lat}))"
        )


def random_amsterdam_bbox(rng: Optional[random.Random] = None) -> BBox:
    """A box of 0.01-0.05 degrees somewhere in the Amsterdam area."""
    r = rng or random
    lon = 4.8 + r.random() * 0.15
    lat = 52.3 + r.random() * 0.08
    size = 0.01 + r.random() * 0.04
    return BBox(lon, lat, lon + size, lat + size)


def random_netherlands_point(rng: Optional[random.Random] = None) -> tuple[float, float]:
    r = rng or random
    return (
        NL_MIN_LON + r.random() * (NL_MAX_LON - NL_MIN_LON),
        NL_MIN_LAT + r.random() * (NL_MAX_LAT - NL_MIN_LAT),
    )


def query_case(
    name: str,
    description: str,
    queries: dict[str, str],
    params: Sequence[Any] = (),
    capture_plan: bool = False,
) -> Case:
    """Build a case that runs one read query chosen by target.

    With capture_plan set, the query plan is fetched once per target and scale,
    on the first call, and attached to that call's result and every later one.

    Args:
        name: Case name
        description: Human-readable description
        queries: SQL text per target identifier
        params: Positional parameters bound as $1, $2, ...
        capture_plan: Attach the target's EXPLAIN output to each result
    """
    plans: dict[tuple[str, int], str] = {}

    async def operation(ctx: ExecutionContext) -> CaseResult:
        sql = queries[ctx.target]
        rows = await ctx.connection.fetch(sql, *params)
        if not capture_plan:
            return CaseResult(rows_returned=len(rows))

        key = (ctx.target, ctx.scale)
        if key not in plans:
            plans[key] = await ctx.connection.explain(sql, *params)
        return CaseResult(rows_returned=len(rows), query_plan=plans[key])

    return Case(name=name, operation=operation, description=description)
