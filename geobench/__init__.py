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
GeoBench Benchmark Runner

A modular harness for benchmarking spatial queries across database targets
under controlled repetition, concurrency and read/write mix, with latency
statistics and container resource samples stored in SQLite.

To add support for a new target:
1. Create a new file in geobench/targets/ (e.g., spatialite_target.py)
2. Subclass BenchmarkTarget from geobench.target_base
3. Implement all abstract methods: connect(), fetch(), execute(), close()
4. Register your target in geobench/targets/__init__.py

To add a new suite, create a module in geobench/suites/ exposing a ``suite``
and register it in geobench/suites/__init__.py.
"""

from geobench.suite import Case, CaseResult, ExecutionContext, Suite
from geobench.target_base import BenchmarkTarget
from geobench.targets import TARGETS, get_target

__all__ = [
    "BenchmarkTarget",
    "Case",
    "CaseResult",
    "ExecutionContext",
    "Suite",
    "TARGETS",
    "get_target",
]
