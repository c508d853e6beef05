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
Benchmark Records

Measurement records and resource snapshots are written once and never
changed. Run records gain a finish timestamp exactly once, at run end.
"""

from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone
from typing import Any, Optional

from geobench.metrics import Stats


def utc_now() -> str:
    """Current time as an ISO-8601 UTC timestamp."""
    return datetime.now(timezone.utc).isoformat()


@dataclass(frozen=True)
class MeasurementRecord:
    """Result of a single timed iteration.

    Attributes:
        run_id: Identifier of the run this iteration belongs to
        suite: Suite name
        case: Case name
        target: Target identifier
        scale: Scale level
        iteration: 1-based timed iteration index
        elapsed_ms: Wall-clock time from a monotonic clock, in milliseconds
        rows_returned: Rows returned or affected (0 when error is set)
        query_plan: Optional plan text
        error: Error message when the iteration failed
        timestamp: ISO-8601 completion time
        failed_operations: Failed operations inside a workload iteration
    """

    run_id: str
    suite: str
    case: str
    target: str
    scale: int
    iteration: int
    elapsed_ms: float
    rows_returned: int = 0
    query_plan: Optional[str] = None
    error: Optional[str] = None
    timestamp: str = field(default_factory=utc_now)
    failed_operations: Optional[int] = None

    @property
    def success(self) -> bool:
        return self.error is None

    def to_dict(self) -> dict[str, Any]:
        """Convert record to dictionary for JSON serialization."""
        return asdict(self)


@dataclass(frozen=True)
class ResourceSnapshot:
    """Point-in-time resource usage of one monitored container."""

    run_id: str
    resource: str
    timestamp: str
    cpu_percent: float
    memory_used_mb: float
    memory_limit_mb: float
    network_rx_bytes: int
    network_tx_bytes: int

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class RunRecord:
    """Metadata for one benchmark invocation.

    A run without finished_at after the process has exited was interrupted.
    """

    run_id: str
    started_at: str
    finished_at: Optional[str] = None
    config: dict[str, Any] = field(default_factory=dict)

    @property
    def is_complete(self) -> bool:
        return self.finished_at is not None


@dataclass(frozen=True)
class AggregateStats:
    """Latency statistics for one suite/case/target/scale group."""

    suite: str
    case: str
    target: str
    scale: int
    stats: Stats

    def to_dict(self) -> dict[str, Any]:
        return {
            "suite": self.suite,
            "case": self.case,
            "target": self.target,
            "scale": self.scale,
            **self.stats.to_dict(),
        }
