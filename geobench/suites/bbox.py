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

"""Bounding box benchmarks: envelope overlap tests."""

from geobench.suite import Suite
from geobench.suites.common import BBox, query_case

AMSTERDAM = BBox(4.8, 52.3, 5.0, 52.4)
NETHERLANDS = BBox(3.37, 50.75, 7.21, 53.47)
SMALL_AREA = BBox(4.89, 52.37, 4.90, 52.375)

OVERLAP = {
    "postgis": """
        SELECT id, name FROM geo_features
        WHERE geom && ST_MakeEnvelope($1, $2, $3, $4, 4326)
    """,
    "duckdb": """
        SELECT id, name FROM geo_features
        WHERE ST_Intersects_Extent(geom, ST_MakeEnvelope($1, $2, $3, $4))
    """,
}

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

suite = Suite(
    name="bbox",
    description="Bounding box query benchmarks - envelope overlap tests",
    targets=("postgis", "duckdb"),
    cases=[
        query_case(
            "bbox-amsterdam",
            "Bounding box overlap for Amsterdam area",
            OVERLAP,
            AMSTERDAM.as_params(),
            capture_plan=True,
        ),
        query_case(
            "bbox-amsterdam-intersects",
            "Explicit envelope intersection (more precise than bbox overlap)",
            INTERSECTS,
            AMSTERDAM.as_params(),
            capture_plan=True,
        ),
        query_case(
            "bbox-netherlands",
            "Bounding box for entire Netherlands",
            OVERLAP,
            NETHERLANDS.as_params(),
        ),
        query_case(
            "bbox-small-area",
            "Very small bounding box (few results)",
            OVERLAP,
            SMALL_AREA.as_params(),
        ),
    ],
)
