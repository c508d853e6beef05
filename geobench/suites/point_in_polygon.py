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

"""Point-in-polygon benchmarks: find all points inside a given polygon."""

from geobench.suite import Suite
from geobench.suites.common import BBox, query_case

AMSTERDAM_CENTER = BBox(4.87, 52.36, 4.92, 52.38).to_wkt()
AMSTERDAM_WIDE = BBox(4.7, 52.3, 5.1, 52.5).to_wkt()
AMSTERDAM_SMALL = BBox(4.89, 52.37, 4.90, 52.375).to_wkt()

POINTS_WITHIN = {
    "postgis": """
        SELECT f.id, f.name FROM geo_features f
        WHERE f.category = 'point'
          AND ST_Within(f.geom, ST_GeomFromText($1, 4326))
    """,
    "duckdb": """
        SELECT f.id, f.name FROM geo_features f
        WHERE f.category = 'point'
          AND ST_Within(f.geom, ST_GeomFromText($1))
    """,
}

suite = Suite(
    name="point-in-polygon",
    description="Point-in-polygon query benchmarks - find all points inside a given polygon",
    targets=("postgis", "duckdb"),
    cases=[
        query_case(
            "pip-amsterdam-center",
            "Points within Amsterdam city center polygon",
            POINTS_WITHIN,
            (AMSTERDAM_CENTER,),
        ),
        query_case(
            "pip-amsterdam-wide",
            "Points within wider Amsterdam area",
            POINTS_WITHIN,
            (AMSTERDAM_WIDE,),
        ),
        query_case(
            "pip-amsterdam-small",
            "Points within small Amsterdam area (few results expected)",
            POINTS_WITHIN,
            (AMSTERDAM_SMALL,),
        ),
    ],
)
