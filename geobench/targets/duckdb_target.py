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
DuckDB Benchmark Target Implementation

This module provides a DuckDB implementation of the BenchmarkTarget interface.
DuckDB is the embedded reference target:
- No external server required
- Native Parquet support for loading geo_features
- Built-in spatial extension

DuckDB calls block, so each one runs in a worker thread on its own cursor;
concurrent workloads therefore really do overlap.
"""

import asyncio
import logging
from pathlib import Path
from typing import Any, Optional

from geobench.config import DuckDBSettings
from geobench.errors import TargetUnavailableError
from geobench.target_base import BenchmarkTarget

logger = logging.getLogger(__name__)

FEATURES_TABLE = "geo_features"


class DuckDBTarget(BenchmarkTarget):
    """DuckDB implementation of the benchmark target.

    Attributes:
        settings: Database path, optional Parquet data directory, spatial flag
        _conn: DuckDB connection object
    """

    def __init__(self, settings: Optional[DuckDBSettings] = None) -> None:
        self.settings = settings or DuckDBSettings.from_env()
        self._conn: Optional[Any] = None

    @property
    def name(self) -> str:
        return "duckdb"

    @property
    def dialect(self) -> str:
        return "DuckDB"

    async def connect(self) -> None:
        """Open the DuckDB database and load the spatial extension.

        Raises:
            TargetUnavailableError: If the database, the extension or the
                configured data directory cannot be opened
        """
        if self._conn is not None:
            return
        await asyncio.to_thread(self._connect_sync)

    def _connect_sync(self) -> None:
        try:
            import duckdb
        except ImportError as e:
            raise ImportError(
                "DuckDB is required for this target. "
                "Install it with: pip install duckdb"
            ) from e

        logger.info(f"Opening DuckDB database {self.settings.database}")
        try:
            conn = duckdb.connect(self.settings.database)
        except duckdb.Error as e:
            raise TargetUnavailableError(f"Cannot open DuckDB database: {e}") from e

        if self.settings.spatial:
            logger.info("Loading DuckDB spatial extension")
            try:
                conn.execute("INSTALL spatial;")
                conn.execute("LOAD spatial;")
            except duckdb.Error as e:
                conn.close()
                raise TargetUnavailableError(
                    f"Failed to load DuckDB spatial extension: {e}"
                ) from e

        self._conn = conn

        if self.settings.data_dir:
            try:
                self.load_data(Path(self.settings.data_dir))
            except (FileNotFoundError, duckdb.Error) as e:
                self._conn = None
                conn.close()
                raise TargetUnavailableError(f"Cannot load DuckDB data: {e}") from e

    def load_data(self, data_dir: Path) -> None:
        """Create the geo_features table from Parquet files in data_dir.

        Supports a single ``geo_features.parquet`` file or a partitioned
        ``geo_features/`` directory. Geometries are expected as WKT in a
        ``geom`` column.

        Raises:
            RuntimeError: If the connection is not established
            FileNotFoundError: If no geo_features data exists in data_dir
        """
        if self._conn is None:
            raise RuntimeError("Connection not established. Call connect() first.")

        parquet_path = data_dir / f"{FEATURES_TABLE}.parquet"
        parquet_dir = data_dir / FEATURES_TABLE

        if parquet_path.exists():
            source = str(parquet_path)
        elif parquet_dir.is_dir():
            source = str(parquet_dir / "*.parquet")
        else:
            raise FileNotFoundError(
                f"Table '{FEATURES_TABLE}' not found at {parquet_path} or {parquet_dir}"
            )

        logger.info(f"Loading {FEATURES_TABLE} from {source}")
        self._conn.execute(
            f"CREATE OR REPLACE TABLE {FEATURES_TABLE} AS "
            f"SELECT * REPLACE (ST_GeomFromText(geom) AS geom) FROM read_parquet('{source}')"
        )
        count = self._conn.execute(f"SELECT COUNT(*) FROM {FEATURES_TABLE}").fetchone()[0]
        logger.info(f"Loaded table '{FEATURES_TABLE}': {count:,} rows")

    def _require_conn(self) -> Any:
        if self._conn is None:
            raise RuntimeError("Connection not established. Call connect() first.")
        return self._conn

    def _fetch_sync(self, sql: str, params: tuple[Any, ...]) -> list[Any]:
        cursor = self._require_conn().cursor()
        try:
            return cursor.execute(sql, list(params) or None).fetchall()
        finally:
            cursor.close()

    def _execute_sync(self, sql: str, params: tuple[Any, ...]) -> int:
        cursor = self._require_conn().cursor()
        try:
            result = cursor.execute(sql, list(params) or None).fetchall()
        finally:
            cursor.close()
        # DML returns a single row holding the affected-row count
        if len(result) == 1 and len(result[0]) == 1 and isinstance(result[0][0], int):
            return result[0][0]
        return 0

    async def fetch(self, sql: str, *params: Any) -> list[Any]:
        return await asyncio.to_thread(self._fetch_sync, sql, params)

    async def execute(self, sql: str, *params: Any) -> int:
        return await asyncio.to_thread(self._execute_sync, sql, params)

    async def close(self) -> None:
        """Close DuckDB connection and release resources."""
        if self._conn is not None:
            logger.info("Closing DuckDB connection")
            self._conn.close()
            self._conn = None

    async def get_version(self) -> str:
        """Return DuckDB version string."""
        if self._conn is None:
            return "unknown"
        rows = await self.fetch("SELECT version()")
        return rows[0][0] if rows else "unknown"
