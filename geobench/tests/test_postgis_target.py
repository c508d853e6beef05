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
Tests for the PostGIS target with asyncpg mocked out.
"""

from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from asyncpg.exceptions import CannotConnectNowError, UndefinedFunctionError

from geobench.config import PostgisSettings
from geobench.errors import TargetUnavailableError
from geobench.targets.postgis_target import PostgisTarget, rows_affected


class TestRowsAffected:
    """Tests for parsing command status strings."""

    def test_insert(self):
        assert rows_affected("INSERT 0 1") == 1

    def test_delete(self):
        assert rows_affected("DELETE 42") == 42

    def test_no_count(self):
        assert rows_affected("CREATE INDEX") == 0
        assert rows_affected("") == 0


def make_target(**kwargs):
    return PostgisTarget(PostgisSettings(host="db"), retry_delay=0, **kwargs)


class TestPostgisTargetConnect:
    """Tests for pool creation and retries."""

    @pytest.mark.asyncio
    async def test_creates_pool_with_settings(self):
        pool = MagicMock()
        with patch("asyncpg.create_pool", new=AsyncMock(return_value=pool)) as create:
            target = make_target()
            await target.connect()

        assert target._pool is pool
        kwargs = create.call_args.kwargs
        assert kwargs["host"] == "db"
        assert kwargs["max_size"] == 60

    @pytest.mark.asyncio
    async def test_retries_transient_errors(self):
        pool = MagicMock()
        create = AsyncMock(side_effect=[CannotConnectNowError("starting up"), pool])
        with patch("asyncpg.create_pool", new=create):
            target = make_target()
            await target.connect()

        assert create.await_count == 2
        assert target._pool is pool

    @pytest.mark.asyncio
    async def test_gives_up_after_max_retries(self):
        create = AsyncMock(side_effect=CannotConnectNowError("starting up"))
        with patch("asyncpg.create_pool", new=create):
            target = make_target(max_retries=3)
            with pytest.raises(TargetUnavailableError, match="after 3 attempts"):
                await target.connect()

        assert create.await_count == 3

    @pytest.mark.asyncio
    async def test_connection_refused(self):
        create = AsyncMock(side_effect=ConnectionRefusedError("refused"))
        with patch("asyncpg.create_pool", new=create):
            with pytest.raises(TargetUnavailableError, match="Cannot connect"):
                await make_target().connect()

        assert create.await_count == 1


class TestPostgisTargetQueries:
    """Tests for fetch/execute through the pool."""

    def connected_target(self):
        target = make_target()
        target._pool = MagicMock()
        target._pool.fetch = AsyncMock(return_value=[(1,), (2,)])
        target._pool.execute = AsyncMock(return_value="INSERT 0 1")
        target._pool.fetchval = AsyncMock()
        target._pool.close = AsyncMock()
        return target

    @pytest.mark.asyncio
    async def test_fetch(self):
        target = self.connected_target()

        rows = await target.fetch("SELECT id FROM geo_features WHERE id = $1", 7)

        assert rows == [(1,), (2,)]
        target._pool.fetch.assert_awaited_once_with("SELECT id FROM geo_features WHERE id = $1", 7)

    @pytest.mark.asyncio
    async def test_execute_returns_row_count(self):
        target = self.connected_target()

        assert await target.execute("INSERT ...") == 1

    @pytest.mark.asyncio
    async def test_fetch_before_connect(self):
        with pytest.raises(RuntimeError, match="connect"):
            await make_target().fetch("SELECT 1")

    @pytest.mark.asyncio
    async def test_close_releases_pool(self):
        target = self.connected_target()
        pool = target._pool

        await target.close()
        await target.close()

        pool.close.assert_awaited_once()
        assert target._pool is None

    @pytest.mark.asyncio
    async def test_version_falls_back_without_postgis(self):
        target = self.connected_target()
        target._pool.fetchval.side_effect = [
            UndefinedFunctionError("function postgis_full_version() does not exist"),
            "PostgreSQL 16.2",
        ]

        assert await target.get_version() == "PostgreSQL 16.2"
