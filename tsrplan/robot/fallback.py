# Copyright 2025-2026 Dimensional Inc.
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""Ordered fallback strategies sharing one wall-clock budget."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, replace
import time

from tsrplan.spec import PlanningResult, PlanningStatus
from tsrplan.utils.logging_config import setup_logger

logger = setup_logger()

Strategy = Callable[[float], PlanningResult]
"""A planning attempt given the remaining seconds"""


class TimeBudget:
    """Deadline measured with time.monotonic from construction."""

    def __init__(self, seconds: float, clock: Callable[[], float] = time.monotonic):
        if seconds < 0.0:
            raise ValueError(f"Time budget must be non-negative, got {seconds}")
        self._clock = clock
        self._seconds = seconds
        self._start = clock()

    @property
    def seconds(self) -> float:
        return self._seconds

    def elapsed(self) -> float:
        return self._clock() - self._start

    def remaining(self) -> float:
        return max(0.0, self._seconds - self.elapsed())

    def expired(self) -> bool:
        return self.remaining() <= 0.0


@dataclass
class FallbackStage:
    name: str
    strategy: Strategy
    requires_time: bool = True
    """Skip the stage once the budget is spent (False for instantaneous checks)"""


class FallbackChain:
    """Run strategies in order until one succeeds or the budget is spent.

    The returned result is the first success, or the last failure with a
    message listing every stage attempted and why it stopped.

    Example:
        chain = FallbackChain()
        chain.add("snap", lambda remaining: snap(...), requires_time=False)
        chain.add("rrt_connect", lambda remaining: rrt(..., timeout=remaining))
        result = chain.run(TimeBudget(5.0))
    """

    def __init__(self) -> None:
        self._stages: list[FallbackStage] = []

    def __len__(self) -> int:
        return len(self._stages)

    def add(self, name: str, strategy: Strategy, requires_time: bool = True) -> FallbackChain:
        self._stages.append(FallbackStage(name, strategy, requires_time))
        return self

    def get_stage_names(self) -> list[str]:
        return [stage.name for stage in self._stages]

    def run(self, budget: TimeBudget | float) -> PlanningResult:
        if not self._stages:
            raise ValueError("FallbackChain has no stages")
        if not isinstance(budget, TimeBudget):
            budget = TimeBudget(budget)

        diagnostics: list[str] = []
        last: PlanningResult | None = None
        iterations = 0

        for stage in self._stages:
            if stage.requires_time and budget.expired():
                diagnostics.append(f"{stage.name}: skipped, time budget spent")
                last = None
                break

            result = stage.strategy(budget.remaining())
            iterations += result.iterations
            if result.is_success():
                logger.debug(
                    "Fallback stage succeeded",
                    stage=stage.name,
                    elapsed=round(budget.elapsed(), 4),
                )
                return replace(result, planning_time=budget.elapsed(), iterations=iterations)

            diagnostics.append(f"{stage.name}: {result.message or result.status.name}")
            last = result

        status = last.status if last is not None else PlanningStatus.TIMEOUT
        return PlanningResult(
            status=status,
            trajectory=None,
            planning_time=budget.elapsed(),
            iterations=iterations,
            message="; ".join(diagnostics),
        )
