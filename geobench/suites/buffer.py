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
Buffer operation benchmarks: create buffers and query with them.

PostGIS buffers through geography so distances are in meters; DuckDB has no
geography type and uses the equivalent distance in degrees.
"""

from geobench.suite import Suite
from geobench.suites.common import query_case

AMSTERDAM_PT = (4.9, 52.37)

BUFFER_POINT = {
    "postgis": """
        SELECT ST_AsGeoJSON(
            ST_Buffer(ST_SetSRID(ST_MakePoint($1, $2), 4326)::geography, $3)::geometry
        ) AS buffer_geojson
    """,
    "duckdb": """
        SELECT ST_AsGeoJSON(ST_Buffer(ST_Point($1, $2), $3 / 111000.0)) AS buffer_geojson
    """,
}

WITHIN_METERS = {
    "postgis": """
        SELECT id, name FROM geo_features
        WHERE ST_DWithin(
            geom::geography, ST_SetSRID(ST_MakePoint($1, $2), 4326)::geography, $3
        )
    """,
    "duckdb": """
        SELECT id, name FROM geo_features
        WHERE ST_DWithin(geom, ST_Point($1, $2), $3 / 111000.0)
    """,
}

BUFFER_POLYGONS = {
    "postgis": """
        SELECT id, ST_AsGeoJSON(ST_Buffer(geom::geography, 500)::geometry) AS buffered
        FROM geo_features
        WHERE category = 'polygon'
          AND geom && ST_MakeEnvelope(4.8, 52.3, 5.0, 52.4, 4326)
        LIMIT 1000
    """,
    "duckdb": """
        SELECT id, ST_AsGeoJSON(ST_Buffer(geom, 0.0045)) AS buffered
        FROM geo_features
        WHERE category = 'polygon'
          AND ST_Intersects_Extent(geom, ST_MakeEnvelope(4.8, 52.3, 5.0, 52.4))
        LIMIT 1000
    """,
}

suite = Suite(
    name="buffer",
    description="Buffer operation benchmarks - create and query buffers",
    targets=("postgis", "duckdb"),
    cases=[
        query_case(
            "buffer-point-1km",
            "Create 1km buffer around a point",
            BUFFER_POINT,
            (*AMSTERDAM_PT, 1000.0),
        ),
        query_case(
            "buffer-find-within-1km",
            "Find features within 1km buffer of a point",
            WITHIN_METERS,
            (*AMSTERDAM_PT, 1000.0),
        ),
        query_case(
            "buffer-polygons-500m",
            "Buffer all polygons in Amsterdam area by 500m",
            BUFFER_POLYGONS,
        ),
        query_case(
            "buffer-point-5km",
            "Create 5km buffer and find intersecting features",
            WITHIN_METERS,
            (*AMSTERDAM_PT, 5000.0),
        ),
    ],
)
