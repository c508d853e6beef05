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
Tests for the target registry.
"""

import pytest

from geobench.target_base import BenchmarkTarget
from geobench.targets import TARGETS, get_target, list_targets
from geobench.targets.duckdb_target import DuckDBTarget
from geobench.targets.postgis_target import PostgisTarget


class TestTargetRegistry:
    """Tests for get_target() and list_targets()."""

    def test_registry_contents(self):
        assert TARGETS == {"postgis": PostgisTarget, "duckdb": DuckDBTarget}

    def test_list_targets_sorted(self):
        assert list_targets() == ["duckdb", "postgis"]

    def test_get_target_case_insensitive(self):
        target = get_target("PostGIS")
        assert isinstance(target, PostgisTarget)
        assert isinstance(target, BenchmarkTarget)

    def test_get_target_returns_new_instances(self):
        assert get_target("duckdb") is not get_target("duckdb")

    def test_unknown_target(self):
        with pytest.raises(ValueError, match="Available targets: duckdb, postgis"):
            get_target("mssql")

    @pytest.mark.parametrize("name,dialect", [("postgis", "PostGIS"), ("duckdb", "DuckDB")])
    def test_names_and_dialects(self, name, dialect):
        target = get_target(name)
        assert target.name == name
        assert target.dialect == dialect
