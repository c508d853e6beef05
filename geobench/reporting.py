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
Benchmark Result Reporting

This module provides utilities for formatting and exporting the aggregate
statistics of a stored run. All times are in milliseconds.
"""

import csv
import json
import sys
from pathlib import Path
from typing import Optional, TextIO

from geobench.records import AggregateStats, RunRecord

STAT_COLUMNS = ["count", "min", "max", "mean", "stddev", "p50", "p95", "p99"]


def print_stats_table(
    stats: list[AggregateStats],
    file: Optional[TextIO] = None,
) -> None:
    """Print aggregate statistics as an ASCII table.

    Args:
        stats: Aggregates to display, in the order given
        file: Output file (defaults to stdout)
    """
    if file is None:
        file = sys.stdout

    if not stats:
        print("No successful measurements", file=file)
        return

    headers = ["Suite", "Case", "Target", "Scale", "N", "p50 (ms)", "p95 (ms)", "p99 (ms)", "Mean (ms)", "StdDev"]
    widths = [16, 28, 8, 10, 5, 10, 10, 10, 10, 8]

    header_line = " | ".join(h.ljust(w) for h, w in zip(headers, widths))
    separator = "-+-".join("-" * w for w in widths)

    print(separator, file=file)
    print(header_line, file=file)
    print(separator, file=file)

    for agg in stats:
        s = agg.stats
        row = [
            agg.suite.ljust(widths[0]),
            agg.case.ljust(widths[1]),
            agg.target.ljust(widths[2]),
            str(agg.scale).rjust(widths[3]),
            str(s.count).rjust(widths[4]),
            f"{s.p50:.2f}".rjust(widths[5]),
            f"{s.p95:.2f}".rjust(widths[6]),
            f"{s.p99:.2f}".rjust(widths[7]),
            f"{s.mean:.2f}".rjust(widths[8]),
            f"{s.stddev:.2f}".rjust(widths[9]),
        ]
        print(" | ".join(row), file=file)

    print(separator, file=file)


def print_comparison_table(
    stats: list[AggregateStats],
    file: Optional[TextIO] = None,
) -> None:
    """Print median latency side by side for every target.

    Args:
        stats: Aggregates of one run
        file: Output file (defaults to stdout)
    """
    if file is None:
        file = sys.stdout

    targets = list(dict.fromkeys(agg.target for agg in stats))
    if len(targets) < 2:
        return

    # (suite, case, scale) -> target -> p50, in first-appearance order
    by_case: dict[tuple[str, str, int], dict[str, float]] = {}
    for agg in stats:
        by_case.setdefault((agg.suite, agg.case, agg.scale), {})[agg.target] = agg.stats.p50

    headers = ["Case", "Scale"] + [f"{name} (ms)" for name in targets]
    widths = [28, 10] + [14] * len(targets)

    header_line = " | ".join(h.ljust(w) for h, w in zip(headers, widths))
    separator = "-+-".join("-" * w for w in widths)

    print("\n" + "=" * len(separator), file=file)
    print("COMPARISON: Median (p50) Latency", file=file)
    print("=" * len(separator), file=file)
    print(header_line, file=file)
    print(separator, file=file)

    for (_, case, scale), p50s in by_case.items():
        row = [case.ljust(widths[0]), str(scale).rjust(widths[1])]
        for i, target in enumerate(targets):
            value = p50s.get(target)
            cell = f"{value:.2f}" if value is not None else "-"
            row.append(cell.rjust(widths[i + 2]))
        print(" | ".join(row), file=file)

    print(separator, file=file)


def save_json(run: RunRecord, stats: list[AggregateStats], output_path: Path) -> None:
    """Save a run's metadata and aggregate statistics to a JSON file.

    Args:
        run: Run metadata, including its configuration snapshot
        stats: Aggregate statistics of the run
        output_path: Path to output file
    """
    output_path.parent.mkdir(parents=True, exist_ok=True)
    payload = {
        "run_id": run.run_id,
        "started_at": run.started_at,
        "finished_at": run.finished_at,
        "config": run.config,
        "results": [agg.to_dict() for agg in stats],
    }
    with open(output_path, "w") as f:
        json.dump(payload, f, indent=2)


def save_csv(stats: list[AggregateStats], output_path: Path) -> None:
    """Save aggregate statistics to a CSV file, one row per group.

    Args:
        stats: Aggregate statistics to save
        output_path: Path to output file
    """
    output_path.parent.mkdir(parents=True, exist_ok=True)

    with open(output_path, "w", newline="") as f:
        writer = csv.writer(f)
        writer.writerow(["suite", "case", "target", "scale"] + STAT_COLUMNS)
        for agg in stats:
            values = agg.stats.to_dict()
            writer.writerow(
                [agg.suite, agg.case, agg.target, agg.scale]
                + [values[column] for column in STAT_COLUMNS]
            )
