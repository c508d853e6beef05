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
Resource Sampler

Polls container resource usage (CPU, memory, network) on a fixed interval
while a benchmark runs. Sampling happens on its own thread so that slow
``docker stats`` calls never stall query execution, and query execution never
delays a sample.

A container that cannot be read on a given tick (stopped, not yet started,
docker unavailable) is skipped for that tick. That is a gap in the time
series, not an error.
"""

import json
import logging
import subprocess
import threading
from dataclasses import dataclass
from typing import Callable, Optional, Protocol, Sequence

from geobench.errors import ResourceUnavailableError
from geobench.records import ResourceSnapshot, utc_now

logger = logging.getLogger(__name__)

DEFAULT_INTERVAL_SECONDS = 1.0
DOCKER_STATS_TIMEOUT_SECONDS = 5.0


@dataclass(frozen=True)
class ResourceUsage:
    """Raw usage counters for one resource at one instant."""

    cpu_percent: float
    memory_used_mb: float
    memory_limit_mb: float
    network_rx_bytes: int
    network_tx_bytes: int


class ResourceMonitor(Protocol):
    """Anything that can report current usage for a resource identifier."""

    def snapshot(self, resource: str) -> ResourceUsage:
        """Return current usage.

        Raises:
            ResourceUnavailableError: If the resource cannot be read right now
        """
        ...


def parse_percent(value: Optional[str]) -> float:
    """Parse a docker percentage such as ``'12.50%'``."""
    if not value:
        return 0.0
    try:
        return float(value.strip().rstrip("%"))
    except ValueError:
        return 0.0


def _leading_number(value: str) -> float:
    digits = ""
    for ch in value.strip():
        if ch.isdigit() or ch in ".-":
            digits += ch
        else:
            break
    try:
        return float(digits)
    except ValueError:
        return 0.0


def parse_memory_mb(value: Optional[str]) -> float:
    """Parse a docker memory figure (``'512MiB'``, ``'1.5GiB'``) into MiB."""
    if not value:
        return 0.0
    amount = _leading_number(value)
    if "GiB" in value:
        return amount * 1024
    if "MiB" in value:
        return amount
    if "KiB" in value:
        return amount / 1024
    return amount


def parse_bytes(value: Optional[str]) -> int:
    """Parse a docker network counter (``'1.2MB'``, ``'648B'``) into bytes."""
    if not value:
        return 0
    amount = _leading_number(value)
    if "GB" in value:
        return int(amount * 1e9)
    if "MB" in value:
        return int(amount * 1e6)
    if "kB" in value or "KB" in value:
        return int(amount * 1e3)
    return int(amount)


def _split_pair(value: Optional[str]) -> tuple[Optional[str], Optional[str]]:
    """Split docker's ``'used / limit'`` style pairs."""
    if not value or "/" not in value:
        return value, None
    left, right = value.split("/", 1)
    return left.strip(), right.strip()


def parse_docker_stats(raw: str) -> ResourceUsage:
    """Parse one line of ``docker stats --format '{{json .}}'`` output."""
    stats = json.loads(raw)
    mem_used, mem_limit = _split_pair(stats.get("MemUsage"))
    net_rx, net_tx = _split_pair(stats.get("NetIO"))
    return ResourceUsage(
        cpu_percent=parse_percent(stats.get("CPUPerc")),
        memory_used_mb=parse_memory_mb(mem_used),
        memory_limit_mb=parse_memory_mb(mem_limit),
        network_rx_bytes=parse_bytes(net_rx),
        network_tx_bytes=parse_bytes(net_tx),
    )


class DockerStatsMonitor:
    """Reads container usage through the ``docker stats`` CLI."""

    def __init__(
        self,
        docker_binary: str = "docker",
        timeout: float = DOCKER_STATS_TIMEOUT_SECONDS,
    ) -> None:
        self.docker_binary = docker_binary
        self.timeout = timeout

    def snapshot(self, resource: str) -> ResourceUsage:
        try:
            result = subprocess.run(
                [
                    self.docker_binary,
                    "stats",
                    resource,
                    "--no-stream",
                    "--format",
                    "{{json .}}",
                ],
                capture_output=True,
                text=True,
                check=True,
                timeout=self.timeout,
            )
        except (OSError, subprocess.SubprocessError) as e:
            raise ResourceUnavailableError(f"docker stats failed for {resource}: {e}") from e

        raw = result.stdout.strip()
        if not raw:
            raise ResourceUnavailableError(f"No stats reported for {resource}")

        try:
            return parse_docker_stats(raw.splitlines()[0])
        except (json.JSONDecodeError, AttributeError) as e:
            raise ResourceUnavailableError(f"Unreadable stats for {resource}: {e}") from e


class ResourceSampler:
    """Timer-driven background poller writing one snapshot per resource per tick.

    Lifecycle is Idle -> Running -> Idle:

        sampler = ResourceSampler(DockerStatsMonitor(), store.append_resource_snapshot,
                                  run_id, ["bench-postgis"])
        sampler.start()   # polls once immediately, then every interval
        ...
        sampler.stop()    # lets an in-flight poll finish; schedules nothing more

    Both start() and stop() are idempotent, and stop() before start() does
    nothing.

    Attributes:
        miss_warning_threshold: Consecutive misses after which a resource is
            reported once at WARNING level. Polling continues regardless.
    """

    def __init__(
        self,
        monitor: ResourceMonitor,
        sink: Callable[[ResourceSnapshot], None],
        run_id: str,
        resources: Sequence[str],
        interval_seconds: float = DEFAULT_INTERVAL_SECONDS,
        miss_warning_threshold: int = 30,
    ) -> None:
        if interval_seconds <= 0:
            raise ValueError(f"interval_seconds must be positive, got {interval_seconds}")
        self.monitor = monitor
        self.sink = sink
        self.run_id = run_id
        self.resources = list(resources)
        self.interval_seconds = interval_seconds
        self.miss_warning_threshold = miss_warning_threshold

        self._lock = threading.Lock()
        self._stop_event = threading.Event()
        self._thread: Optional[threading.Thread] = None
        self._misses: dict[str, int] = {name: 0 for name in self.resources}
        self._snapshot_count = 0

    @property
    def running(self) -> bool:
        return self._thread is not None

    @property
    def snapshot_count(self) -> int:
        """Snapshots successfully handed to the sink so far."""
        return self._snapshot_count

    def start(self) -> None:
        """Poll once now, then keep polling every interval on a daemon thread."""
        with self._lock:
            if self._thread is not None:
                return
            self._stop_event.clear()
            self.poll()
            self._thread = threading.Thread(
                target=self._loop,
                name=f"resource-sampler-{self.run_id[:8]}",
                daemon=True,
            )
            self._thread.start()
        logger.info(
            f"Resource sampling started for {', '.join(self.resources) or 'no resources'} "
            f"every {self.interval_seconds}s"
        )

    def stop(self) -> None:
        """Stop scheduling polls and wait for an in-flight poll to finish."""
        with self._lock:
            thread = self._thread
            if thread is None:
                return
            self._stop_event.set()
            self._thread = None
        thread.join()
        logger.info(f"Resource sampling stopped after {self._snapshot_count} snapshots")

    def _loop(self) -> None:
        while not self._stop_event.wait(self.interval_seconds):
            self.poll()

    def poll(self) -> None:
        """Take one snapshot of every monitored resource."""
        for resource in self.resources:
            try:
                usage = self.monitor.snapshot(resource)
            except Exception as e:
                self._record_miss(resource, e)
                continue

            self._misses[resource] = 0
            snapshot = ResourceSnapshot(
                run_id=self.run_id,
                resource=resource,
                timestamp=utc_now(),
                cpu_percent=usage.cpu_percent,
                memory_used_mb=usage.memory_used_mb,
                memory_limit_mb=usage.memory_limit_mb,
                network_rx_bytes=usage.network_rx_bytes,
                network_tx_bytes=usage.network_tx_bytes,
            )
            try:
                self.sink(snapshot)
            except Exception as e:
                logger.error(f"Failed to store resource snapshot for {resource}: {e}")
                continue
            self._snapshot_count += 1

    def _record_miss(self, resource: str, error: Exception) -> None:
        misses = self._misses.get(resource, 0) + 1
        self._misses[resource] = misses
        logger.debug(f"Resource {resource} unavailable: {error}")
        if misses == self.miss_warning_threshold:
            logger.warning(
                f"Resource {resource} has been unavailable for {misses} consecutive polls"
            )
