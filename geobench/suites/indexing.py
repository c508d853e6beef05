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

"""Spatial index build time: drop and recreate the GiST index."""

from geobench.suite import Case, CaseResult, ExecutionContext, Suite

INDEX_NAME = "idx_geo_features_geom"

SIZE_SQL = f"SELECT pg_relation_size('{INDEX_NAME}') AS size_bytes"


async def _index_size(ctx: ExecutionContext) -> int:
    rows = await ctx.connection.fetch(SIZE_SQL)
    return rows[0][0] if rows else 0


async def rebuild_index(ctx: ExecutionContext) -> CaseResult:
    # rows_returned carries the index size in bytes
    await ctx.connection.execute(f"DROP INDEX IF EXISTS {INDEX_NAME}")
    await ctx.connection.execute(
        f"CREATE INDEX {INDEX_NAME} ON geo_features USING GIST (geom)"
    )
    return CaseResult(rows_returned=await _index_size(ctx))


async def index_size(ctx: ExecutionContext) -> CaseResult:
    return CaseResult(rows_returned=await _index_size(ctx))


suite = Suite(
    name="indexing",
    description="Spatial index build time - drop and recreate spatial indexes",
    targets=("postgis",),
    cases=[
        Case(
            "gist-index-rebuild",
            rebuild_index,
            "Drop and recreate GiST index on geo_features",
        ),
        Case(
            "index-size-check",
            index_size,
            "Query spatial index size without rebuild",
        ),
    ],
)
