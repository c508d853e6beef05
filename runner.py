#!/usr/bin/env python3
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

A CLI tool for executing spatial benchmark suites against database targets,
storing every measurement and resource sample in a SQLite results database.

Usage Examples:
    # Run all suites against both targets with default settings
    python runner.py

    # Run one suite against PostGIS only, 10 timed iterations
    python runner.py --suite bbox --target postgis --iterations 10

    # Run at a single scale and export aggregate stats
    python runner.py --scale 5000 --output results/latest.json

    # Run without docker resource sampling
    python runner.py --no-resource-stats

    # List available suites and targets
    python runner.py --list-suites
    python runner.py --list-targets

Connection settings are read from the environment (PG_HOST, PG_PORT,
PG_DATABASE, PG_USER, PG_PASSWORD, DUCKDB_PATH, DUCKDB_DATA_DIR).
"""

import argparse
import asyncio
import logging
import sys
from pathlib import Path
from typing import Optional

from geobench.config import RunnerConfig
from geobench.errors import InfrastructureError
from geobench.orchestrator import RunOrchestrator
from geobench.reporting import (
    print_comparison_table,
    print_stats_table,
    save_csv,
    save_json,
)
from geobench.results_store import ResultsStore
from geobench.suites import SUITES, get_suites, list_suites
from geobench.targets import get_target, list_targets

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(levelname)s - %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)
logger = logging.getLogger(__name__)


def split_list(value: Optional[str]) -> list[str]:
    """Split a comma-separated argument into trimmed, non-empty items."""
    if not value:
        return []
    return [item.strip() for item in value.split(",") if item.strip()]


def split_ints(value: Optional[str]) -> list[int]:
    return [int(item) for item in split_list(value)]


def build_config(args: argparse.Namespace) -> RunnerConfig:
    """Translate parsed arguments into a RunnerConfig.

    Options left unset keep the RunnerConfig defaults.

    Raises:
        ValueError: If a list argument cannot be parsed or a value is out of range
    """
    config = RunnerConfig()
    config.suites = split_list(args.suite)
    if args.target and args.target.lower() != "all":
        config.targets = [name.lower() for name in split_list(args.target)]
    if args.scale:
        config.scales = split_ints(args.scale)
    if args.concurrency:
        config.concurrency_levels = split_ints(args.concurrency)
    if args.iterations is not None:
        config.iterations = args.iterations
    if args.warmup is not None:
        config.warmup_iterations = args.warmup
    if args.db_path:
        config.db_path = str(args.db_path)
    if args.no_resource_stats:
        config.collect_resource_stats = False
    if args.resources:
        config.monitored_resources = split_list(args.resources)
    config.timeout_seconds = args.timeout

    for name in config.targets:
        get_target(name)
    config.validate()
    return config


def export_results(store: ResultsStore, run_id: str, output_path: Path, output_format: str) -> None:
    run = store.get_run(run_id)
    stats = store.query_stats_for_run(run_id)

    if output_path.suffix.lower() == ".csv":
        output_format = "csv"
    elif output_path.suffix.lower() == ".json":
        output_format = "json"

    if output_format == "json":
        save_json(run, stats, output_path)
    else:
        save_csv(stats, output_path)
    logger.info(f"Results saved to {output_path}")


def main(argv: Optional[list[str]] = None) -> int:
    """Main entry point for the benchmark runner."""
    parser = argparse.ArgumentParser(
        description="GeoBench Benchmark Runner",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s --suite bbox,distance --target postgis
  %(prog)s --scale 5000 --iterations 10 --warmup 1
  %(prog)s --output results/latest.json
  %(prog)s --list-suites
        """,
    )

    # Selection
    parser.add_argument(
        "--suite",
        type=str,
        help=f"Comma-separated suites to run. Default: all. Available: {', '.join(list_suites())}",
    )
    parser.add_argument(
        "--target",
        "-t",
        type=str,
        help=f"Comma-separated targets, or 'all'. Available: {', '.join(list_targets())}",
    )
    parser.add_argument(
        "--scale",
        "-s",
        type=str,
        help="Comma-separated scale levels (default: 5000,2000000)",
    )
    parser.add_argument(
        "--concurrency",
        type=str,
        help="Comma-separated concurrency levels for the concurrent suite",
    )

    # Repetition
    parser.add_argument(
        "--iterations",
        "-n",
        type=int,
        help="Timed iterations per case (default: 50)",
    )
    parser.add_argument(
        "--warmup",
        type=int,
        help="Warmup iterations per case, discarded (default: 3)",
    )
    parser.add_argument(
        "--timeout",
        type=float,
        help="Per-operation timeout in seconds; a timeout counts as a failed iteration",
    )

    # Storage and resource sampling
    parser.add_argument(
        "--db-path",
        type=Path,
        help="SQLite results database (default: results/benchmark-results.db)",
    )
    parser.add_argument(
        "--no-resource-stats",
        action="store_true",
        help="Disable docker resource sampling",
    )
    parser.add_argument(
        "--resources",
        type=str,
        help="Comma-separated container names to sample (default: bench-postgis,bench-duckdb)",
    )

    # Output configuration
    parser.add_argument(
        "--output",
        "-o",
        type=Path,
        help="Export aggregate stats of the run (JSON or CSV based on extension)",
    )
    parser.add_argument(
        "--output-format",
        type=str,
        choices=["json", "csv"],
        default="json",
        help="Output format when extension is ambiguous (default: json)",
    )
    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Enable verbose (debug) logging",
    )

    # Information commands
    parser.add_argument(
        "--list-suites",
        action="store_true",
        help="List available benchmark suites and exit",
    )
    parser.add_argument(
        "--list-targets",
        action="store_true",
        help="List available targets and exit",
    )

    args = parser.parse_args(argv)

    # Handle verbose logging
    if args.verbose:
        logging.getLogger().setLevel(logging.DEBUG)

    # Handle information commands
    if args.list_suites:
        print("Available benchmark suites:")
        for name in list_suites():
            suite = SUITES[name]
            print(f"  - {name} ({', '.join(suite.targets)}): {suite.description}")
        return 0

    if args.list_targets:
        print("Available targets:")
        for name in list_targets():
            print(f"  - {name} (dialect: {get_target(name).dialect})")
        return 0

    try:
        config = build_config(args)
        suites = get_suites(config.suites, config.concurrency_levels)
    except ValueError as e:
        logger.error(str(e))
        return 1

    logger.info(
        f"Running {len(suites)} suites on {', '.join(config.targets)} "
        f"at scales {', '.join(str(s) for s in config.scales)}"
    )

    try:
        with ResultsStore(config.db_path) as store:
            orchestrator = RunOrchestrator(config, store, suites)
            run_id = asyncio.run(orchestrator.run())

            stats = store.query_stats_for_run(run_id)
            print(f"\n{'='*60}")
            print(f"RESULTS (run {run_id})")
            print(f"{'='*60}\n")
            print_stats_table(stats)
            print_comparison_table(stats)

            if args.output:
                export_results(store, run_id, args.output, args.output_format)
    except InfrastructureError as e:
        logger.error(f"Benchmark run failed: {e}")
        if args.verbose:
            import traceback

            traceback.print_exc()
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
