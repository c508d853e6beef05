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

"""Complex polygon operations: difference, symmetric difference, convex hull."""

from geobench.suite import Suite
from geobench.suites.common import query_case

DIFFERENCE = """
    SELECT ST_AsGeoJSON(ST_Difference(a.geom, b.geom)) AS diff_geojson
    FROM geo_features a, geo_features b
    WHERE a.id = 1 AND b.id = 2
"""

SYM_DIFFERENCE = """
    SELECT ST_AsGeoJSON(ST_SymDifference(a.geom, b.geom)) AS symdiff_geojson
    FROM geo_features a, geo_features b
    WHERE a.id = 1 AND b.id = 2
"""

CONVEX_HULL = {
    "postgis": """
        SELECT ST_AsGeoJSON(ST_ConvexHull(ST_Collect(geom))) AS hull_geojson
        FROM geo_features
        WHERE geom && ST_MakeEnvelope(4.8, 52.3, 5.0, 52.4, 4326)
    """,
    "duckdb": """
        SELECT ST_AsGeoJSON(ST_ConvexHull(ST_Collect(list(geom)))) AS hull_geojson
        FROM geo_features
        WHERE ST_Intersects_Extent(geom, ST_MakeEnvelope(4.8, 52.3, 5.0, 52.4))
    """,
}

DIFFERENCE_BATCH = """
    SELECT ST_AsGeoJSON(ST_Difference(a.geom, b.geom)) AS diff_geojson
    FROM (SELECT id, geom FROM geo_features WHERE category = 'polygon' ORDER BY id LIMIT 50) a
    CROSS JOIN LATERAL (
        SELECT geom FROM geo_features
        WHERE category = 'polygon' AND id > a.id
        ORDER BY id
        LIMIT 1
    ) b
"""

suite = Suite(
    name="complex-ops",
    description="Complex polygon operations - difference, symmetric difference, convex hull",
    targets=("postgis", "duckdb"),
    cases=[
        query_case(
            "difference-two-features",
            "Difference between two features (a - b)",
            {"postgis": DIFFERENCE, "duckdb": DIFFERENCE},
        ),
        query_case(
            "symmetric-difference",
            "Symmetric difference between two features",
            {"postgis": SYM_DIFFERENCE, "duckdb": SYM_DIFFERENCE},
        ),
        query_case(
            "convex-hull-amsterdam",
            "Convex hull of all features in Amsterdam area",
            CONVEX_HULL,
        ),
        query_case(
            "difference-batch",
            "Pairwise difference of first 50 polygon pairs",
            {"postgis": DIFFERENCE_BATCH, "duckdb": DIFFERENCE_BATCH},
        ),
    ],
)
