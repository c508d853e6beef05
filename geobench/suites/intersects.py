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

"""ST_Intersects benchmarks: the core spatial query use case."""

from geobench.suite import Suite
from geobench.suites.common import BBox, query_case

AREAS = {
    "small": BBox(4.89, 52.37, 4.91, 52.38),
    "medium": BBox(4.85, 52.34, 4.95, 52.40),
    "large": BBox(4.7, 52.25, 5.1, 52.5),
    "province": BBox(4.5, 52.0, 5.3, 52.8),
}

INTERSECTS = {
    "postgis": """
        SELECT id, name FROM geo_features
        WHERE ST_Intersects(geom, ST_GeomFromText($1, 4326))
    """,
    "duckdb": """
        SELECT id, name FROM geo_features
        WHERE ST_Intersects(geom, ST_GeomFromText($1))
    """,
}

POLYGONS_ONLY = {
    "postgis": """
        SELECT id, name FROM geo_features
        WHERE category = 'polygon'
          AND ST_Intersects(geom, ST_GeomFromText($1, 4326))
    """,
    "duckdb": """
        SELECT id, name FROM geo_features
        WHERE category = 'polygon'
          AND ST_Intersects(geom, ST_GeomFromText($1))
    """,
}

suite = Suite(
    name="intersects",
    description="ST_Intersects benchmarks - the core spatial query use case",
    targets=("postgis", "duckdb"),
    cases=[
        *(
            query_case(
                f"intersects-{size}",
                f"Features intersecting a {size} query polygon",
                INTERSECTS,
                (area.to_wkt(),),
            )
            for size, area in AREAS.items()
        ),
        query_case(
            "intersects-polygons-only",
            "Intersects filtered to polygon category only",
            POLYGONS_ONLY,
            (AREAS["medium"].to_wkt(),),
        ),
    ],
)
