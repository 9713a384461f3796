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

"""RRT-Connect motion planner implementing PlannerSpec.

The planner is robot-agnostic: feasibility comes only from the Testable and
random targets only from the Sampleable it is handed, so it works with any
RobotModel and any combination of constraints.
"""

from __future__ import annotations

from collections.abc import Sequence
import time
from typing import TYPE_CHECKING

import numpy as np

from tsrplan.planners.results import create_failure_result, create_success_result
from tsrplan.planners.tree import Tree
from tsrplan.spec import PlanningStatus
from tsrplan.utils.logging_config import setup_logger
from tsrplan.utils.path_utils import is_segment_valid, simplify_path

if TYPE_CHECKING:
    from tsrplan.spec import (
        DistanceMetric,
        Interpolator,
        PlanningResult,
        Sampleable,
        State,
        Testable,
    )

logger = setup_logger()


class RRTConnectPlanner:
    """Bi-directional RRT-Connect planner.

    The goal tree starts with one root per goal, so plural goals are searched
    at once and the first goal reached wins.
    """

    def __init__(
        self,
        interpolator: Interpolator,
        metric: DistanceMetric,
        step_size: float = 0.1,
        connect_step_size: float = 0.05,
        goal_tolerance: float = 1e-6,
        collision_resolution: float = 0.02,
        max_iterations: int = 5000,
        shortcut_iterations: int = 100,
        rng: np.random.Generator | None = None,
    ):
        if step_size <= 0.0 or connect_step_size <= 0.0:
            raise ValueError("step_size and connect_step_size must be positive")
        if collision_resolution <= 0.0:
            raise ValueError(f"collision_resolution must be positive, got {collision_resolution}")
        self._interpolator = interpolator
        self._metric = metric
        self._step_size = step_size
        self._connect_step_size = connect_step_size
        self._goal_tolerance = goal_tolerance
        self._collision_resolution = collision_resolution
        self._max_iterations = max_iterations
        self._shortcut_iterations = shortcut_iterations
        self._rng = rng if rng is not None else np.random.default_rng()

    def plan(
        self,
        start: State,
        goals: State | Sequence[State],
        sampleable: Sampleable,
        testable: Testable,
        timeout: float = 10.0,
    ) -> PlanningResult:
        """Plan a path from start to any of the goals."""
        start_time = time.monotonic()

        q_start = np.array(start, dtype=np.float64)
        goal_list = self._as_goal_list(goals, q_start.shape)

        error = self._validate_inputs(q_start, goal_list, testable)
        if error is not None:
            return error

        valid_goals = [q for q in goal_list if testable.is_satisfied(q)]

        start_tree = Tree(self._metric)
        start_tree.add_root(q_start)
        goal_tree = Tree(self._metric)
        for q_goal in valid_goals:
            goal_tree.add_root(q_goal)
        trees_swapped = False

        generator = sampleable.create_sample_generator()

        for iteration in range(self._max_iterations):
            if time.monotonic() - start_time >= timeout:
                return create_failure_result(
                    PlanningStatus.TIMEOUT,
                    f"RRTConnect: timeout after {iteration} iterations",
                    time.monotonic() - start_time,
                    iteration,
                )

            if not generator.can_sample():
                return create_failure_result(
                    PlanningStatus.EXHAUSTED,
                    "RRTConnect: sampleable exhausted",
                    time.monotonic() - start_time,
                    iteration,
                )
            sample = generator.sample()
            if sample is None:
                continue

            extended = self._extend_tree(start_tree, sample, self._step_size, testable)

            if extended is not None:
                connected = self._connect_tree(
                    goal_tree,
                    start_tree.config(extended),
                    testable,
                    start_time + timeout,
                )
                if connected is not None:
                    path = start_tree.path_to_root(extended)
                    tail = list(reversed(goal_tree.path_to_root(connected)))
                    # Connect ends on the extended node itself
                    if self._metric.distance(path[-1], tail[0]) <= self._goal_tolerance:
                        tail = tail[1:]
                    path = path + tail
                    if trees_swapped:
                        path = list(reversed(path))
                    path = simplify_path(
                        path,
                        testable,
                        self._interpolator,
                        self._metric,
                        self._rng,
                        max_iterations=self._shortcut_iterations,
                        resolution=self._collision_resolution,
                    )
                    logger.debug("RRTConnect found path", iterations=iteration + 1)
                    return create_success_result(
                        path,
                        self._interpolator,
                        self._metric,
                        time.monotonic() - start_time,
                        iteration + 1,
                    )

            start_tree, goal_tree = goal_tree, start_tree
            trees_swapped = not trees_swapped

        return create_failure_result(
            PlanningStatus.EXHAUSTED,
            f"RRTConnect: no path found after {self._max_iterations} iterations",
            time.monotonic() - start_time,
            self._max_iterations,
        )

    def get_name(self) -> str:
        """Get planner name."""
        return "RRTConnect"

    @staticmethod
    def _as_goal_list(goals: State | Sequence[State], shape: tuple[int, ...]) -> list[State]:
        goal_array = np.asarray(goals, dtype=np.float64)
        if goal_array.shape == shape:
            return [goal_array]
        if goal_array.ndim != 2 or goal_array.shape[1:] != shape:
            raise ValueError(
                f"Goals of shape {goal_array.shape} do not match start shape {shape}"
            )
        return [q.copy() for q in goal_array]

    def _validate_inputs(
        self,
        q_start: State,
        goals: list[State],
        testable: Testable,
    ) -> PlanningResult | None:
        """Validate planning inputs, returns error result or None if valid."""
        if not goals:
            raise ValueError("RRTConnect requires at least one goal")

        if not testable.is_satisfied(q_start):
            return create_failure_result(
                PlanningStatus.INFEASIBLE,
                "RRTConnect: start configuration is infeasible",
            )

        if not any(testable.is_satisfied(q) for q in goals):
            return create_failure_result(
                PlanningStatus.INFEASIBLE,
                f"RRTConnect: all {len(goals)} goal configuration(s) are infeasible",
            )

        return None

    def _extend_tree(
        self,
        tree: Tree,
        target: State,
        step_size: float,
        testable: Testable,
        from_index: int | None = None,
    ) -> int | None:
        """Extend tree toward target, returns new node index if successful."""
        nearest = tree.nearest(target) if from_index is None else from_index
        q_near = tree.config(nearest)

        dist = self._metric.distance(q_near, target)
        if dist == 0.0:
            return None

        if dist <= step_size:
            new_config = np.array(target, dtype=np.float64)
        else:
            new_config = self._interpolator.interpolate(q_near, target, step_size / dist)

        if is_segment_valid(
            q_near,
            new_config,
            testable,
            self._interpolator,
            self._metric,
            self._collision_resolution,
            skip_start=True,
        ):
            return tree.add_node(new_config, nearest)

        return None

    def _connect_tree(
        self,
        tree: Tree,
        target: State,
        testable: Testable,
        deadline: float,
    ) -> int | None:
        """Try to connect tree to target, returns connected node index if successful."""
        current = tree.nearest(target)
        if self._metric.distance(tree.config(current), target) <= self._goal_tolerance:
            return current

        while time.monotonic() < deadline:
            result = self._extend_tree(
                tree, target, self._connect_step_size, testable, from_index=current
            )
            if result is None:
                return None

            if self._metric.distance(tree.config(result), target) <= self._goal_tolerance:
                return result
            current = result

        return None
