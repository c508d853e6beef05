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

"""Distance and nearest-neighbour benchmarks.

Radii are in degrees on both targets so that results stay comparable.
"""

from geobench.suite import Suite
from geobench.suites.common import query_case

AMSTERDAM_PT = (4.9, 52.37)
ROTTERDAM_PT = (4.48, 51.92)

# ~1 km and ~5 km at Dutch latitudes
RADIUS_1KM = 0.009
RADIUS_5KM = 0.045

KNN = {
    "postgis": """
        SELECT id, name FROM geo_features
        ORDER BY geom <-> ST_SetSRID(ST_MakePoint($1, $2), 4326)
        LIMIT $3
    """,
    "duckdb": """
        SELECT id, name FROM geo_features
        ORDER BY ST_Distance(geom, ST_Point($1, $2))
        LIMIT $3
    """,
}

WITHIN = {
    "postgis": """
        SELECT id, name FROM geo_features
        WHERE ST_DWithin(geom, ST_SetSRID(ST_MakePoint($1, $2), 4326), $3)
    """,
    "duckdb": """
        SELECT id, name FROM geo_features
        WHERE ST_DWithin(geom, ST_Point($1, $2), $3)
    """,
}

suite = Suite(
    name="distance",
    description="Distance and nearest neighbor query benchmarks",
    targets=("postgis", "duckdb"),
    cases=[
        query_case("knn-10-amsterdam", "10 nearest neighbors to Amsterdam center", KNN, (*AMSTERDAM_PT, 10)),
        query_case("knn-50-amsterdam", "50 nearest neighbors to Amsterdam center", KNN, (*AMSTERDAM_PT, 50)),
        query_case(
            "within-5km-amsterdam",
            "All features within 5km of Amsterdam center",
            WITHIN,
            (*AMSTERDAM_PT, RADIUS_5KM),
        ),
        query_case(
            "within-1km-amsterdam",
            "All features within 1km of Amsterdam center",
            WITHIN,
            (*AMSTERDAM_PT, RADIUS_1KM),
        ),
        query_case("knn-10-rotterdam", "10 nearest neighbors to Rotterdam (different area)", KNN, (*ROTTERDAM_PT, 10)),
    ],
)
