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
PostGIS Benchmark Target Implementation

Runs benchmark operations against PostgreSQL/PostGIS through an asyncpg
connection pool. The pool is sized for the highest concurrency level used by
the concurrent workloads, so every in-flight operation gets its own
connection.
"""

import asyncio
import logging
from typing import Any, Optional

import asyncpg
from asyncpg.exceptions import CannotConnectNowError, TooManyConnectionsError

from geobench.config import PostgisSettings
from geobench.errors import TargetUnavailableError
from geobench.target_base import BenchmarkTarget

logger = logging.getLogger(__name__)


def rows_affected(status: str) -> int:
    """Extract the row count from a command status such as ``'INSERT 0 1'``."""
    parts = status.split() if status else []
    if parts and parts[-1].isdigit():
        return int(parts[-1])
    return 0


class PostgisTarget(BenchmarkTarget):
    """PostGIS implementation of the benchmark target.

    Attributes:
        settings: Host, credentials and pool sizing
        max_retries: Pool creation attempts for transient startup errors
        retry_delay: Base delay between attempts, in seconds
    """

    def __init__(
        self,
        settings: Optional[PostgisSettings] = None,
        max_retries: int = 3,
        retry_delay: float = 1.0,
    ) -> None:
        self.settings = settings or PostgisSettings.from_env()
        self.max_retries = max_retries
        self.retry_delay = retry_delay
        self._pool: Optional[asyncpg.Pool] = None

    @property
    def name(self) -> str:
        return "postgis"

    @property
    def dialect(self) -> str:
        return "PostGIS"

    async def connect(self) -> None:
        """Create the asyncpg pool, retrying transient startup errors.

        Raises:
            TargetUnavailableError: If the database cannot be reached
        """
        if self._pool is not None:
            return

        s = self.settings
        logger.info(
            f"Creating PostGIS pool: {s.user}@{s.host}:{s.port}/{s.database} "
            f"(size {s.min_pool_size}-{s.max_pool_size})"
        )

        for attempt in range(self.max_retries):
            try:
                self._pool = await asyncpg.create_pool(
                    host=s.host,
                    port=s.port,
                    database=s.database,
                    user=s.user,
                    password=s.password,
                    min_size=s.min_pool_size,
                    max_size=s.max_pool_size,
                    command_timeout=s.command_timeout,
                )
                logger.info("PostGIS pool ready")
                return
            except (CannotConnectNowError, TooManyConnectionsError) as e:
                if attempt < self.max_retries - 1:
                    logger.warning(f"Pool creation attempt {attempt + 1} failed, retrying: {e}")
                    await asyncio.sleep(self.retry_delay * (attempt + 1))
                else:
                    raise TargetUnavailableError(
                        f"PostGIS unavailable after {self.max_retries} attempts: {e}"
                    ) from e
            except (OSError, asyncpg.PostgresError) as e:
                raise TargetUnavailableError(f"Cannot connect to PostGIS: {e}") from e

    def _require_pool(self) -> asyncpg.Pool:
        if self._pool is None:
            raise RuntimeError("Connection not established. Call connect() first.")
        return self._pool

    async def fetch(self, sql: str, *params: Any) -> list[Any]:
        return await self._require_pool().fetch(sql, *params)

    async def execute(self, sql: str, *params: Any) -> int:
        status = await self._require_pool().execute(sql, *params)
        return rows_affected(status)

    async def close(self) -> None:
        if self._pool is not None:
            logger.info("Closing PostGIS pool")
            await self._pool.close()
            self._pool = None

    async def get_version(self) -> str:
        if self._pool is None:
            return "unknown"
        try:
            version = await self._pool.fetchval("SELECT PostGIS_Full_Version()")
        except asyncpg.PostgresError:
            version = await self._pool.fetchval("SELECT version()")
        return version or "unknown"
