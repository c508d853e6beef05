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
Abstract Base Class for Benchmark Targets

A target is one benchmarked database backend. It owns the connection (or
connection pool) and exposes a minimal async query API that suite operations
use through ExecutionContext.connection.

To implement a new target:

    from geobench.target_base import BenchmarkTarget

    class MyTarget(BenchmarkTarget):
        '''Target implementation for MyGeoDB.'''

        @property
        def name(self) -> str:
            return "mygeodb"

        @property
        def dialect(self) -> str:
            return "MyGeoDB"

        async def connect(self) -> None:
            self._pool = await mygeodb.create_pool(...)

        async def fetch(self, sql: str, *params: Any) -> list[Any]:
            return await self._pool.fetch(sql, *params)

        async def execute(self, sql: str, *params: Any) -> int:
            return await self._pool.execute(sql, *params)

        async def close(self) -> None:
            await self._pool.close()

Then register it in geobench/targets/__init__.py.
"""

from abc import ABC, abstractmethod
from typing import Any
import time


class BenchmarkTarget(ABC):
    """Abstract base class for benchmark targets.

    The typical lifecycle is owned by the run orchestrator:
        1. target = get_target("postgis")
        2. await target.connect()
        3. operations call target.fetch() / target.execute() concurrently
        4. await target.close()

    Async context manager support is provided for automatic cleanup:
        async with get_target("duckdb") as target:
            rows = await target.fetch("SELECT 1")
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Return the short identifier for this target (e.g., 'postgis').

        This is used in CLI arguments, suite declarations and stored results.
        """
        pass

    @property
    @abstractmethod
    def dialect(self) -> str:
        """Return the SQL dialect name suites use to pick query text."""
        pass

    @abstractmethod
    async def connect(self) -> None:
        """Establish the connection or connection pool.

        Raises:
            TargetUnavailableError: If the target cannot be reached
        """
        pass

    @abstractmethod
    async def fetch(self, sql: str, *params: Any) -> list[Any]:
        """Run a query and return all rows.

        Must be safe to call concurrently from several tasks.
        """
        pass

    @abstractmethod
    async def execute(self, sql: str, *params: Any) -> int:
        """Run a statement and return the number of rows affected."""
        pass

    @abstractmethod
    async def close(self) -> None:
        """Release connections and any other resources. Safe to call twice."""
        pass

    async def explain(self, sql: str, *params: Any) -> str:
        """Return the query plan for sql as text.

        The default runs ``EXPLAIN <sql>`` and joins the plan text (the only
        or last column) of every returned row.
        """
        rows = await self.fetch(f"EXPLAIN {sql}", *params)
        return "\n".join(str(row[0]) if len(row) == 1 else str(row[-1]) for row in rows)

    async def get_version(self) -> str:
        """Return the version string of the database.

        Override this method to provide version information for the run log.
        """
        return "unknown"

    async def __aenter__(self) -> "BenchmarkTarget":
        await self.connect()
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        await self.close()


class TimedExecution:
    """Context manager for timing code execution on a monotonic clock.

    Usage:
        with TimedExecution() as timer:
            await operation(ctx)
        print(f"Elapsed: {timer.elapsed_ms:.3f}ms")

    The end time is recorded even when the body raises.
    """

    def __init__(self) -> None:
        self.start_time: float = 0.0
        self.end_time: float = 0.0
        self.elapsed: float = 0.0

    @property
    def elapsed_ms(self) -> float:
        return self.elapsed * 1000.0

    def __enter__(self) -> "TimedExecution":
        self.start_time = time.perf_counter()
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        self.end_time = time.perf_counter()
        self.elapsed = self.end_time - self.start_time
