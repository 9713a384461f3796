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

"""Snap planner: the straight-line fast path tried before any tree search."""

from __future__ import annotations

import time
from typing import TYPE_CHECKING

import numpy as np

from tsrplan.planners.results import create_failure_result, create_success_result
from tsrplan.spec import PlanningStatus
from tsrplan.utils.logging_config import setup_logger
from tsrplan.utils.path_utils import discretize_segment

if TYPE_CHECKING:
    from tsrplan.spec import DistanceMetric, Interpolator, PlanningResult, State, Testable

logger = setup_logger()


class SnapPlanner:
    """Plans the direct interpolated segment between two states.

    The segment is discretized at `resolution` and every state, both
    endpoints included, must satisfy the Testable. A failing state is a
    normal "fast path missed" outcome (INFEASIBLE), never an exception.
    """

    def __init__(
        self,
        interpolator: Interpolator,
        metric: DistanceMetric,
        resolution: float = 0.1,
    ):
        if resolution <= 0.0:
            raise ValueError(f"resolution must be positive, got {resolution}")
        self._interpolator = interpolator
        self._metric = metric
        self._resolution = resolution

    def plan(self, start: State, goal: State, testable: Testable) -> PlanningResult:
        """Return a two-waypoint trajectory if the whole segment is feasible."""
        if testable is None:
            raise TypeError("SnapPlanner requires a Testable")

        start_time = time.monotonic()
        q_start = np.asarray(start, dtype=np.float64)
        q_goal = np.asarray(goal, dtype=np.float64)
        if q_start.shape != q_goal.shape:
            raise ValueError(
                f"Start shape {q_start.shape} does not match goal shape {q_goal.shape}"
            )

        states = discretize_segment(
            q_start, q_goal, self._interpolator, self._metric, self._resolution
        )
        for index, state in enumerate(states):
            if not testable.is_satisfied(state):
                return create_failure_result(
                    PlanningStatus.INFEASIBLE,
                    f"Snap: state {index} of {len(states)} along the direct path is infeasible",
                    time.monotonic() - start_time,
                    index + 1,
                )

        result = create_success_result(
            [q_start, q_goal],
            self._interpolator,
            self._metric,
            time.monotonic() - start_time,
            len(states),
            message="Snap: direct path is feasible",
        )
        logger.debug("Snap planner found direct path", length=result.path_length)
        return result

    def get_name(self) -> str:
        return "Snap"


def plan_snap(
    start: State,
    goal: State,
    interpolator: Interpolator,
    metric: DistanceMetric,
    testable: Testable,
    resolution: float = 0.1,
) -> PlanningResult:
    """Function form of SnapPlanner.plan."""
    return SnapPlanner(interpolator, metric, resolution).plan(start, goal, testable)
