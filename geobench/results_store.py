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
SQLite Results Store

Append-only storage for runs, per-iteration measurements and resource
snapshots, plus the aggregate statistics read path used by reports.

Records are never updated or deleted through this interface; the only
mutation is setting a run's finish timestamp. A run that was never finished
(crash, Ctrl-C) stays visible as incomplete.

The store is shared between the orchestrator and the resource sampler thread,
so a single connection is guarded by a lock.
"""

import json
import logging
import sqlite3
import threading
from pathlib import Path
from typing import Any, Iterable, Optional, Union

from geobench.errors import DuplicateRunError, ResultsStoreError
from geobench.metrics import compute_stats
from geobench.records import (
    AggregateStats,
    MeasurementRecord,
    ResourceSnapshot,
    RunRecord,
    utc_now,
)

logger = logging.getLogger(__name__)

SCHEMA = """
CREATE TABLE IF NOT EXISTS runs (
    run_id TEXT PRIMARY KEY,
    started_at TEXT NOT NULL,
    finished_at TEXT,
    config_json TEXT
);

CREATE TABLE IF NOT EXISTS benchmark_results (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    run_id TEXT NOT NULL,
    suite TEXT NOT NULL,
    benchmark TEXT NOT NULL,
    target TEXT NOT NULL,
    scale INTEGER NOT NULL,
    iteration INTEGER NOT NULL,
    query_time_ms REAL NOT NULL,
    rows_returned INTEGER NOT NULL,
    query_plan TEXT,
    error TEXT,
    failed_operations INTEGER,
    timestamp TEXT NOT NULL
);

CREATE INDEX IF NOT EXISTS idx_results_run ON benchmark_results(run_id);
CREATE INDEX IF NOT EXISTS idx_results_suite ON benchmark_results(suite, benchmark, target);

CREATE TABLE IF NOT EXISTS resource_snapshots (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    run_id TEXT NOT NULL,
    resource TEXT NOT NULL,
    timestamp TEXT NOT NULL,
    cpu_percent REAL NOT NULL,
    memory_usage_mb REAL NOT NULL,
    memory_limit_mb REAL NOT NULL,
    network_rx_bytes INTEGER NOT NULL,
    network_tx_bytes INTEGER NOT NULL
);

CREATE INDEX IF NOT EXISTS idx_resources_run ON resource_snapshots(run_id);
"""

INSERT_MEASUREMENT = """
INSERT INTO benchmark_results (
    run_id, suite, benchmark, target, scale, iteration, query_time_ms,
    rows_returned, query_plan, error, failed_operations, timestamp
) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
"""

INSERT_SNAPSHOT = """
INSERT INTO resource_snapshots (
    run_id, resource, timestamp, cpu_percent, memory_usage_mb,
    memory_limit_mb, network_rx_bytes, network_tx_bytes
) VALUES (?, ?, ?, ?, ?, ?, ?, ?)
"""


class ResultsStore:
    """Benchmark results database.

    Usage:
        with ResultsStore("results/benchmark-results.db") as store:
            store.record_run(run_id, config.to_dict())
            store.append_measurements(records)
            store.finish_run(run_id)
            for group in store.query_stats_for_run(run_id):
                print(group.case, group.stats.p95)

    Every sqlite3 error is re-raised as ResultsStoreError.
    """

    def __init__(self, path: Union[str, Path]) -> None:
        self.path = str(path)
        self._lock = threading.Lock()
        self._conn: Optional[sqlite3.Connection] = None

    def open(self) -> "ResultsStore":
        """Open the database file and create the schema if needed."""
        if self._conn is not None:
            return self
        if self.path != ":memory:":
            Path(self.path).parent.mkdir(parents=True, exist_ok=True)
        try:
            conn = sqlite3.connect(self.path, check_same_thread=False)
            conn.row_factory = sqlite3.Row
            conn.execute("PRAGMA journal_mode = WAL")
            conn.executescript(SCHEMA)
        except sqlite3.Error as e:
            raise ResultsStoreError(f"Cannot open results store at {self.path}: {e}") from e
        self._conn = conn
        logger.debug(f"Results store opened at {self.path}")
        return self

    def close(self) -> None:
        with self._lock:
            if self._conn is not None:
                self._conn.close()
                self._conn = None

    def __enter__(self) -> "ResultsStore":
        return self.open()

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        self.close()

    def _connection(self) -> sqlite3.Connection:
        if self._conn is None:
            raise ResultsStoreError("Results store is not open. Call open() first.")
        return self._conn

    def _write(self, sql: str, params: Iterable[Any]) -> sqlite3.Cursor:
        with self._lock:
            conn = self._connection()
            try:
                with conn:
                    return conn.execute(sql, tuple(params))
            except sqlite3.Error as e:
                raise ResultsStoreError(f"Write to results store failed: {e}") from e

    def _read(self, sql: str, params: Iterable[Any] = ()) -> list[sqlite3.Row]:
        with self._lock:
            conn = self._connection()
            try:
                return conn.execute(sql, tuple(params)).fetchall()
            except sqlite3.Error as e:
                raise ResultsStoreError(f"Read from results store failed: {e}") from e

    # ─── Runs ────────────────────────────────────────────────────────

    def record_run(self, run_id: str, config: dict[str, Any]) -> RunRecord:
        """Create the run record with the current time as start.

        Raises:
            DuplicateRunError: If run_id has been recorded before
        """
        started_at = utc_now()
        try:
            self._write(
                "INSERT INTO runs (run_id, started_at, config_json) VALUES (?, ?, ?)",
                (run_id, started_at, json.dumps(config, default=str)),
            )
        except ResultsStoreError as e:
            if isinstance(e.__cause__, sqlite3.IntegrityError):
                raise DuplicateRunError(f"Run '{run_id}' already exists") from e.__cause__
            raise
        return RunRecord(run_id=run_id, started_at=started_at, config=config)

    def finish_run(self, run_id: str) -> None:
        """Set the finish timestamp. Calling it again overwrites the timestamp."""
        self._write(
            "UPDATE runs SET finished_at = ? WHERE run_id = ?",
            (utc_now(), run_id),
        )

    def get_run(self, run_id: str) -> Optional[RunRecord]:
        rows = self._read("SELECT * FROM runs WHERE run_id = ?", (run_id,))
        return _row_to_run(rows[0]) if rows else None

    def list_runs(self) -> list[RunRecord]:
        """All runs, newest first."""
        rows = self._read("SELECT * FROM runs ORDER BY started_at DESC")
        return [_row_to_run(row) for row in rows]

    def get_incomplete_runs(self) -> list[RunRecord]:
        """Runs that were started but never finished."""
        rows = self._read(
            "SELECT * FROM runs WHERE finished_at IS NULL ORDER BY started_at DESC"
        )
        return [_row_to_run(row) for row in rows]

    def latest_run_id(self) -> Optional[str]:
        rows = self._read("SELECT run_id FROM runs ORDER BY started_at DESC LIMIT 1")
        return rows[0]["run_id"] if rows else None

    # ─── Measurements ────────────────────────────────────────────────

    def append_measurements(self, records: list[MeasurementRecord]) -> None:
        """Insert all records in one transaction; either all land or none do."""
        if not records:
            return
        params = [
            (
                r.run_id,
                r.suite,
                r.case,
                r.target,
                r.scale,
                r.iteration,
                r.elapsed_ms,
                r.rows_returned,
                r.query_plan,
                r.error,
                r.failed_operations,
                r.timestamp,
            )
            for r in records
        ]
        with self._lock:
            conn = self._connection()
            try:
                with conn:
                    conn.executemany(INSERT_MEASUREMENT, params)
            except sqlite3.Error as e:
                raise ResultsStoreError(
                    f"Failed to store {len(records)} measurements: {e}"
                ) from e

    def get_measurements(self, run_id: str) -> list[MeasurementRecord]:
        rows = self._read(
            "SELECT * FROM benchmark_results WHERE run_id = ? ORDER BY id", (run_id,)
        )
        return [
            MeasurementRecord(
                run_id=row["run_id"],
                suite=row["suite"],
                case=row["benchmark"],
                target=row["target"],
                scale=row["scale"],
                iteration=row["iteration"],
                elapsed_ms=row["query_time_ms"],
                rows_returned=row["rows_returned"],
                query_plan=row["query_plan"],
                error=row["error"],
                timestamp=row["timestamp"],
                failed_operations=row["failed_operations"],
            )
            for row in rows
        ]

    # ─── Resource snapshots ──────────────────────────────────────────

    def append_resource_snapshot(self, snapshot: ResourceSnapshot) -> None:
        self._write(
            INSERT_SNAPSHOT,
            (
                snapshot.run_id,
                snapshot.resource,
                snapshot.timestamp,
                snapshot.cpu_percent,
                snapshot.memory_used_mb,
                snapshot.memory_limit_mb,
                snapshot.network_rx_bytes,
                snapshot.network_tx_bytes,
            ),
        )

    def get_resource_snapshots(self, run_id: str) -> list[ResourceSnapshot]:
        rows = self._read(
            "SELECT * FROM resource_snapshots WHERE run_id = ? ORDER BY id", (run_id,)
        )
        return [
            ResourceSnapshot(
                run_id=row["run_id"],
                resource=row["resource"],
                timestamp=row["timestamp"],
                cpu_percent=row["cpu_percent"],
                memory_used_mb=row["memory_usage_mb"],
                memory_limit_mb=row["memory_limit_mb"],
                network_rx_bytes=row["network_rx_bytes"],
                network_tx_bytes=row["network_tx_bytes"],
            )
            for row in rows
        ]

    # ─── Aggregates ──────────────────────────────────────────────────

    def query_stats_for_run(self, run_id: str) -> list[AggregateStats]:
        """Latency statistics per suite/case/target/scale for a run.

        Only successful iterations contribute. A group in which every
        iteration failed is left out entirely, so every returned group has
        at least one sample.
        """
        rows = self._read(
            """
            SELECT suite, benchmark, target, scale, query_time_ms
            FROM benchmark_results
            WHERE run_id = ? AND error IS NULL
            ORDER BY id
            """,
            (run_id,),
        )

        groups: dict[tuple[str, str, str, int], list[float]] = {}
        for row in rows:
            key = (row["suite"], row["benchmark"], row["target"], row["scale"])
            groups.setdefault(key, []).append(row["query_time_ms"])

        return [
            AggregateStats(suite=suite, case=case, target=target, scale=scale, stats=compute_stats(times))
            for (suite, case, target, scale), times in groups.items()
        ]


def _row_to_run(row: sqlite3.Row) -> RunRecord:
    config = json.loads(row["config_json"]) if row["config_json"] else {}
    return RunRecord(
        run_id=row["run_id"],
        started_at=row["started_at"],
        finished_at=row["finished_at"],
        config=config,
    )
