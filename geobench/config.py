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
Runner Configuration

RunnerConfig is the shape the CLI parses into; it is stored verbatim with
every run so results can be traced back to how they were produced.

Connection settings for targets come from environment variables so that
credentials never end up in the stored configuration snapshot.
"""

import os
from dataclasses import asdict, dataclass, field
from typing import Any, Mapping, Optional


@dataclass
class RunnerConfig:
    """Configuration for one benchmark invocation.

    Attributes:
        suites: Suite names to run (empty = all)
        targets: Target identifiers to benchmark
        scales: Scale levels to run every suite under
        iterations: Timed iterations per case
        warmup_iterations: Discarded iterations before timing starts
        concurrency_levels: Concurrency levels for concurrent workloads
        db_path: Path to the SQLite results database
        collect_resource_stats: Whether to sample container resources
        monitored_resources: Container names to sample
        sample_interval_seconds: Resource sampling interval
        timeout_seconds: Optional per-operation timeout
    """

    suites: list[str] = field(default_factory=list)
    targets: list[str] = field(default_factory=lambda: ["postgis", "duckdb"])
    scales: list[int] = field(default_factory=lambda: [5_000, 2_000_000])
    iterations: int = 50
    warmup_iterations: int = 3
    concurrency_levels: list[int] = field(default_factory=lambda: [5, 10, 25, 50])
    db_path: str = "results/benchmark-results.db"
    collect_resource_stats: bool = True
    monitored_resources: list[str] = field(
        default_factory=lambda: ["bench-postgis", "bench-duckdb"]
    )
    sample_interval_seconds: float = 1.0
    timeout_seconds: Optional[float] = None

    def validate(self) -> None:
        """Check value ranges.

        Raises:
            ValueError: If any setting is out of range
        """
        if self.iterations < 1:
            raise ValueError(f"iterations must be at least 1, got {self.iterations}")
        if self.warmup_iterations < 0:
            raise ValueError(f"warmup iterations must be >= 0, got {self.warmup_iterations}")
        if not self.targets:
            raise ValueError("At least one target is required")
        if not self.scales:
            raise ValueError("At least one scale is required")
        if any(c < 1 for c in self.concurrency_levels):
            raise ValueError(f"concurrency levels must be >= 1, got {self.concurrency_levels}")
        if self.sample_interval_seconds <= 0:
            raise ValueError("sample interval must be positive")
        if self.timeout_seconds is not None and self.timeout_seconds <= 0:
            raise ValueError("timeout must be positive")

    def to_dict(self) -> dict[str, Any]:
        """Serializable snapshot stored with the run record."""
        return asdict(self)


@dataclass
class PostgisSettings:
    """Connection settings for the PostGIS target."""

    host: str = "localhost"
    port: int = 5432
    database: str = "geobench"
    user: str = "bench"
    password: str = "bench"
    min_pool_size: int = 1
    max_pool_size: int = 60
    command_timeout: float = 300.0

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "PostgisSettings":
        env = os.environ if environ is None else environ
        return cls(
            host=env.get("PG_HOST", cls.host),
            port=int(env.get("PG_PORT", cls.port)),
            database=env.get("PG_DATABASE", cls.database),
            user=env.get("PG_USER", cls.user),
            password=env.get("PG_PASSWORD", cls.password),
            max_pool_size=int(env.get("PG_POOL_MAX", cls.max_pool_size)),
        )


@dataclass
class DuckDBSettings:
    """Settings for the embedded DuckDB target.

    Attributes:
        database: Database file, or ":memory:"
        data_dir: Optional directory holding geo_features Parquet files to load
        spatial: Whether to install and load the spatial extension
    """

    database: str = ":memory:"
    data_dir: Optional[str] = None
    spatial: bool = True

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "DuckDBSettings":
        env = os.environ if environ is None else environ
        return cls(
            database=env.get("DUCKDB_PATH", cls.database),
            data_dir=env.get("DUCKDB_DATA_DIR") or None,
        )
