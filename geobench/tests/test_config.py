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
Tests for runner configuration and environment-driven target settings.
"""

import pytest

from geobench.config import DuckDBSettings, PostgisSettings, RunnerConfig
from geobench.suites import concurrent


class TestRunnerConfig:
    """Tests for RunnerConfig defaults and validation."""

    def test_defaults(self):
        config = RunnerConfig()

        assert config.targets == ["postgis", "duckdb"]
        assert config.scales == [5_000, 2_000_000]
        assert config.iterations == 50
        assert config.warmup_iterations == 3
        assert config.concurrency_levels == [5, 10, 25, 50]
        assert config.db_path == "results/benchmark-results.db"
        assert config.collect_resource_stats is True
        assert config.timeout_seconds is None
        config.validate()

    def test_default_levels_match_concurrent_suite(self):
        """Rebuilding the concurrent suite from defaults yields the default cases."""
        assert RunnerConfig().concurrency_levels == list(concurrent.DEFAULT_LEVELS)

    def test_default_lists_not_shared(self):
        a = RunnerConfig()
        a.targets.append("x")
        assert RunnerConfig().targets == ["postgis", "duckdb"]

    @pytest.mark.parametrize(
        "overrides,message",
        [
            ({"iterations": 0}, "iterations"),
            ({"warmup_iterations": -1}, "warmup"),
            ({"targets": []}, "target"),
            ({"scales": []}, "scale"),
            ({"concurrency_levels": [5, 0]}, "concurrency"),
            ({"sample_interval_seconds": 0}, "interval"),
            ({"timeout_seconds": -2.0}, "timeout"),
        ],
    )
    def test_validate_rejects(self, overrides, message):
        with pytest.raises(ValueError, match=message):
            RunnerConfig(**overrides).validate()

    def test_to_dict_is_plain_snapshot(self):
        d = RunnerConfig(suites=["bbox"], iterations=5).to_dict()
        assert d["suites"] == ["bbox"]
        assert d["iterations"] == 5
        assert d["monitored_resources"] == ["bench-postgis", "bench-duckdb"]


class TestPostgisSettings:
    """Tests for PostgisSettings.from_env()."""

    def test_defaults_without_env(self):
        s = PostgisSettings.from_env({})
        assert (s.host, s.port, s.database, s.user) == ("localhost", 5432, "geobench", "bench")
        assert s.max_pool_size == 60

    def test_reads_environment(self):
        s = PostgisSettings.from_env({
            "PG_HOST": "db",
            "PG_PORT": "5433",
            "PG_DATABASE": "gis",
            "PG_USER": "u",
            "PG_PASSWORD": "p",
            "PG_POOL_MAX": "80",
        })
        assert (s.host, s.port, s.database, s.user, s.password) == ("db", 5433, "gis", "u", "p")
        assert s.max_pool_size == 80


class TestDuckDBSettings:
    """Tests for DuckDBSettings.from_env()."""

    def test_defaults_without_env(self):
        s = DuckDBSettings.from_env({})
        assert s.database == ":memory:"
        assert s.data_dir is None
        assert s.spatial is True

    def test_reads_environment(self):
        s = DuckDBSettings.from_env({"DUCKDB_PATH": "/tmp/bench.duckdb", "DUCKDB_DATA_DIR": "/data"})
        assert s.database == "/tmp/bench.duckdb"
        assert s.data_dir == "/data"
