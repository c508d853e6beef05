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
Benchmark Suite Registry

This module provides registration and discovery of suite definitions.
To add a new suite, create a module exposing ``suite`` and add it to SUITES.
"""

from typing import Iterable, Optional

from geobench.suite import Suite
from geobench.suites import (
    bbox,
    buffer,
    bulk_import,
    complex_ops,
    concurrent,
    distance,
    indexing,
    intersects,
    mixed_workload,
    point_in_polygon,
    union,
)

# Registry of available suites, in run order
SUITES: dict[str, Suite] = {
    s.name: s
    for s in (
        bulk_import.suite,
        indexing.suite,
        point_in_polygon.suite,
        intersects.suite,
        bbox.suite,
        distance.suite,
        buffer.suite,
        union.suite,
        complex_ops.suite,
        concurrent.suite,
        mixed_workload.suite,
    )
}


def get_suite(name: str) -> Suite:
    """Get a registered suite by name.

    Raises:
        ValueError: If suite name is not recognized
    """
    if name not in SUITES:
        available = ", ".join(SUITES.keys())
        raise ValueError(f"Unknown suite '{name}'. Available suites: {available}")
    return SUITES[name]


def get_suites(
    names: Optional[Iterable[str]] = None,
    concurrency_levels: Optional[Iterable[int]] = None,
) -> list[Suite]:
    """Select suites to run.

    Args:
        names: Suite names to include, in registry order (None or empty = all)
        concurrency_levels: Levels for the concurrent suite (default levels if None)

    Raises:
        ValueError: If any name is not recognized
    """
    wanted = list(names or [])
    for name in wanted:
        get_suite(name)

    selected = [s for s in SUITES.values() if not wanted or s.name in wanted]
    if concurrency_levels is not None:
        selected = [
            concurrent.build_suite(concurrency_levels) if s.name == concurrent.suite.name else s
            for s in selected
        ]
    return selected


def list_suites() -> list[str]:
    """Return suite names in run order."""
    return list(SUITES.keys())


__all__ = ["SUITES", "get_suite", "get_suites", "list_suites"]
