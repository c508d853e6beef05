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
Tests for result tables and exports.
"""

import csv
import io
import json

from geobench.metrics import compute_stats
from geobench.records import AggregateStats, RunRecord
from geobench.reporting import (
    print_comparison_table,
    print_stats_table,
    save_csv,
    save_json,
)


def aggregate(case, target, times, scale=5000):
    return AggregateStats(suite="bbox", case=case, target=target, scale=scale, stats=compute_stats(times))


STATS = [
    aggregate("bbox-amsterdam", "postgis", [1.0, 2.0, 3.0]),
    aggregate("bbox-amsterdam", "duckdb", [4.0, 5.0, 6.0]),
    aggregate("bbox-netherlands", "postgis", [10.0]),
]

RUN = RunRecord(
    run_id="run-1",
    started_at="2026-01-01T00:00:00+00:00",
    finished_at="2026-01-01T00:05:00+00:00",
    config={"iterations": 3},
)


class TestPrintStatsTable:
    """Tests for print_stats_table()."""

    def test_prints_one_row_per_group(self):
        out = io.StringIO()

        print_stats_table(STATS, file=out)

        lines = out.getvalue().splitlines()
        # separator, header, separator, 3 rows, separator
        assert len(lines) == 7
        assert "p50 (ms)" in lines[1]
        assert "bbox-amsterdam" in lines[3]
        assert "2.00" in lines[3]

    def test_empty(self):
        out = io.StringIO()
        print_stats_table([], file=out)
        assert "No successful measurements" in out.getvalue()


class TestPrintComparisonTable:
    """Tests for print_comparison_table()."""

    def test_side_by_side_p50(self):
        out = io.StringIO()

        print_comparison_table(STATS, file=out)

        text = out.getvalue()
        assert "COMPARISON: Median (p50) Latency" in text
        assert "postgis (ms)" in text and "duckdb (ms)" in text
        amsterdam = next(line for line in text.splitlines() if line.startswith("bbox-amsterdam"))
        assert "2.00" in amsterdam and "5.00" in amsterdam
        netherlands = next(line for line in text.splitlines() if line.startswith("bbox-netherlands"))
        assert netherlands.rstrip().endswith("-")

    def test_single_target_prints_nothing(self):
        out = io.StringIO()
        print_comparison_table(STATS[:1], file=out)
        assert out.getvalue() == ""


class TestExports:
    """Tests for JSON and CSV export."""

    def test_save_json(self, tmp_path):
        path = tmp_path / "out" / "results.json"

        save_json(RUN, STATS, path)

        data = json.loads(path.read_text())
        assert data["run_id"] == "run-1"
        assert data["config"] == {"iterations": 3}
        assert len(data["results"]) == 3
        assert data["results"][0]["p50"] == 2.0
        assert data["results"][0]["target"] == "postgis"

    def test_save_csv(self, tmp_path):
        path = tmp_path / "results.csv"

        save_csv(STATS, path)

        with open(path, newline="") as f:
            rows = list(csv.DictReader(f))
        assert len(rows) == 3
        assert rows[1]["target"] == "duckdb"
        assert float(rows[1]["p50"]) == 5.0
        assert rows[2]["count"] == "1"
