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

"""Union and spatial aggregation benchmarks."""

from geobench.suite import Suite
from geobench.suites.common import query_case

UNION_AMSTERDAM = {
    "postgis": """
        SELECT ST_AsGeoJSON(ST_Union(geom)) AS unified
        FROM geo_features
        WHERE category = 'polygon'
          AND geom && ST_MakeEnvelope(4.8, 52.3, 5.0, 52.4, 4326)
    """,
    "duckdb": """
        SELECT ST_AsGeoJSON(ST_Union_Agg(geom)) AS unified
        FROM geo_features
        WHERE category = 'polygon'
          AND ST_Intersects_Extent(geom, ST_MakeEnvelope(4.8, 52.3, 5.0, 52.4))
    """,
}

GRID_AGGREGATION = {
    "postgis": """
        SELECT ST_AsText(ST_SnapToGrid(geom, 0.01)) AS cell, COUNT(*) AS feature_count
        FROM geo_features
        GROUP BY ST_SnapToGrid(geom, 0.01)
        ORDER BY feature_count DESC
        LIMIT 20
    """,
    "duckdb": """
        SELECT round(ST_X(ST_Centroid(geom)), 2) AS cell_x,
               round(ST_Y(ST_Centroid(geom)), 2) AS cell_y,
               COUNT(*) AS feature_count
        FROM geo_features
        GROUP BY cell_x, cell_y
        ORDER BY feature_count DESC
        LIMIT 20
    """,
}

suite = Suite(
    name="union",
    description="Union and spatial aggregation benchmarks",
    targets=("postgis", "duckdb"),
    cases=[
        query_case(
            "union-polygons-amsterdam",
            "Union all polygons in Amsterdam area",
            UNION_AMSTERDAM,
        ),
        query_case(
            "spatial-grid-aggregation",
            "Count features per grid cell (spatial aggregation)",
            GRID_AGGREGATION,
        ),
    ],
)
