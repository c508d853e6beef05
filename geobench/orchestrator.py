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
Run Orchestrator

Drives one benchmark invocation end to end:

1. Record the run with its configuration snapshot
2. Open every configured target that a selected suite supports
3. Start the resource sampler (if enabled)
4. For each suite x target x scale: setup, run every case, teardown
5. Stop the sampler, mark the run finished and close targets

Case failures never abort the run; they become error records. A target that
cannot be opened, a failing suite setup hook and a results store that cannot
be written are fatal and propagate once the finalization steps have run.
"""

import logging
import uuid
from typing import Callable, Optional, Sequence

from geobench.config import RunnerConfig
from geobench.errors import SuiteSetupError
from geobench.executor import run_case
from geobench.metrics import compute_stats
from geobench.records import MeasurementRecord
from geobench.results_store import ResultsStore
from geobench.sampler import DockerStatsMonitor, ResourceMonitor, ResourceSampler
from geobench.suite import ExecutionContext, Suite
from geobench.target_base import BenchmarkTarget
from geobench.targets import get_target

logger = logging.getLogger(__name__)


def format_case_summary(case: str, records: Sequence[MeasurementRecord]) -> str:
    """One progress line for a finished case, in milliseconds."""
    times = [r.elapsed_ms for r in records if r.success]
    errors = len(records) - len(times)

    if not times:
        return f"  [✗] {case}: FAILED ({errors}/{len(records)} errors)"

    s = compute_stats(times)
    line = (
        f"  [✓] {case}: p50={s.p50:.2f}ms p95={s.p95:.2f}ms p99={s.p99:.2f}ms "
        f"mean={s.mean:.2f}ms stddev={s.stddev:.2f}ms"
    )
    if errors:
        line += f" ({errors}/{len(records)} errors)"
    return line


class RunOrchestrator:
    """Executes selected suites against configured targets and scales.

    Attributes:
        config: Validated runner configuration
        store: Open results store; owned by the caller
        suites: Suites to run, in order
        target_factory: Builds an unconnected target from its identifier
        monitor: Resource monitor for the sampler (docker stats if None)
    """

    def __init__(
        self,
        config: RunnerConfig,
        store: ResultsStore,
        suites: Sequence[Suite],
        *,
        target_factory: Callable[[str], BenchmarkTarget] = get_target,
        monitor: Optional[ResourceMonitor] = None,
    ) -> None:
        self.config = config
        self.store = store
        self.suites = list(suites)
        self.target_factory = target_factory
        self.monitor = monitor
        self.targets: dict[str, BenchmarkTarget] = {}
        self.run_id: Optional[str] = None

    def _needed_targets(self) -> list[str]:
        return [
            name
            for name in self.config.targets
            if any(suite.supports(name) for suite in self.suites)
        ]

    async def _open_targets(self) -> None:
        for name in self._needed_targets():
            target = self.target_factory(name)
            # Registered before connecting so a partly opened target is closed too
            self.targets[name] = target
            await target.connect()
            logger.info(f"Connected to {target.dialect}: {await target.get_version()}")

    async def _close_targets(self) -> None:
        for name, target in self.targets.items():
            try:
                await target.close()
            except Exception as e:
                logger.error(f"Failed to close target {name}: {e}")
        self.targets.clear()

    def _start_sampler(self, run_id: str) -> Optional[ResourceSampler]:
        if not self.config.collect_resource_stats or not self.config.monitored_resources:
            return None
        sampler = ResourceSampler(
            self.monitor or DockerStatsMonitor(),
            self.store.append_resource_snapshot,
            run_id,
            self.config.monitored_resources,
            interval_seconds=self.config.sample_interval_seconds,
        )
        sampler.start()
        return sampler

    async def run(self) -> str:
        """Execute the whole run.

        Returns:
            The run id under which all results were stored

        Raises:
            InfrastructureError: If a target cannot be opened or results cannot
                be stored
        """
        run_id = str(uuid.uuid4())
        self.run_id = run_id
        self.store.record_run(run_id, self.config.to_dict())
        logger.info(f"Starting run {run_id}")

        sampler: Optional[ResourceSampler] = None
        try:
            await self._open_targets()
            sampler = self._start_sampler(run_id)

            for suite in self.suites:
                await self._run_suite(run_id, suite)
        finally:
            if sampler is not None:
                sampler.stop()
            try:
                self.store.finish_run(run_id)
            except Exception as e:
                logger.error(f"Failed to mark run {run_id} finished: {e}")
            await self._close_targets()

        logger.info(f"Run {run_id} complete")
        return run_id

    async def _run_suite(self, run_id: str, suite: Suite) -> None:
        for target_name in self.config.targets:
            if not suite.supports(target_name):
                logger.info(f"Skipping suite {suite.name} for {target_name} (not supported)")
                continue

            target = self.targets[target_name]
            for scale in self.config.scales:
                context = ExecutionContext(
                    target=target_name,
                    scale=scale,
                    connection=target,
                    timeout_seconds=self.config.timeout_seconds,
                )
                await self._run_combination(run_id, suite, context)

    async def _run_combination(
        self, run_id: str, suite: Suite, context: ExecutionContext
    ) -> None:
        print(f"\n{'='*60}")
        print(f"Suite: {suite.name} | Target: {context.target} | Scale: {context.scale:,}")
        print(f"{'='*60}")

        if suite.setup is not None:
            try:
                await suite.setup(context)
            except Exception as e:
                raise SuiteSetupError(
                    f"Setup of {suite.name} failed on {context.target} "
                    f"(scale {context.scale}): {e}"
                ) from e

        for case in suite.cases:
            records = await run_case(
                case.operation,
                context,
                run_id=run_id,
                suite=suite.name,
                case=case.name,
                warmup_iterations=self.config.warmup_iterations,
                timed_iterations=self.config.iterations,
                timeout_seconds=(
                    None if case.per_operation_timeout else self.config.timeout_seconds
                ),
            )
            self.store.append_measurements(records)
            print(format_case_summary(case.name, records))

        if suite.teardown is not None:
            try:
                await suite.teardown(context)
            except Exception as e:
                logger.error(
                    f"Teardown of {suite.name} failed on {context.target} "
                    f"(scale {context.scale}): {e}"
                )
