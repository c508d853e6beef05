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
Benchmark Target Registry

This module provides registration and discovery of target implementations.
To add a new target, import it here and add it to the TARGETS dictionary.
"""

from typing import Type

from geobench.target_base import BenchmarkTarget

# Import target implementations
from geobench.targets.duckdb_target import DuckDBTarget
from geobench.targets.postgis_target import PostgisTarget

# Registry of available targets
# Key: CLI argument name (lowercase)
# Value: Target class
TARGETS: dict[str, Type[BenchmarkTarget]] = {
    "postgis": PostgisTarget,
    "duckdb": DuckDBTarget,
}


def get_target(name: str) -> BenchmarkTarget:
    """Get an unconnected instance of the specified target.

    Connection settings are read from the environment by each target.

    Args:
        name: Target name (case-insensitive)

    Returns:
        An instance of the requested target

    Raises:
        ValueError: If target name is not recognized
    """
    name_lower = name.lower()
    if name_lower not in TARGETS:
        available = ", ".join(sorted(TARGETS.keys()))
        raise ValueError(f"Unknown target '{name}'. Available targets: {available}")

    return TARGETS[name_lower]()


def list_targets() -> list[str]:
    """Return list of available target names."""
    return sorted(TARGETS.keys())


__all__ = [
    "TARGETS",
    "get_target",
    "list_targets",
    "DuckDBTarget",
    "PostgisTarget",
]
