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

"""Constrained bi-directional RRT-Connect (CRRT-Connect).

Two trees grow toward each other: one rooted at the start state, one whose
roots are goal samples. Every extension step is projected onto the
trajectory constraint manifold, and a new node is accepted only if the
projection converged, did not move the state too far, and the edge to it is
valid at the collision resolution.
"""

from __future__ import annotations

from dataclasses import dataclass
import time
from typing import TYPE_CHECKING

import numpy as np

from tsrplan.constraint.intersection import TestableIntersection
from tsrplan.planners.results import create_failure_result, create_success_result
from tsrplan.planners.tree import Tree
from tsrplan.spec import PlanningStatus
from tsrplan.utils.logging_config import setup_logger
from tsrplan.utils.path_utils import is_segment_valid

if TYPE_CHECKING:
    from tsrplan.spec import (
        DistanceMetric,
        Interpolator,
        PlanningResult,
        Projectable,
        SampleGenerator,
        Sampleable,
        State,
        Testable,
    )

logger = setup_logger()


@dataclass
class _Query:
    """Per-call inputs shared by the extension helpers."""

    constraint: Projectable
    validity: Testable
    deadline: float

    def expired(self) -> bool:
        return time.monotonic() >= self.deadline


class CRRTConnectPlanner:
    """Bi-directional RRT-Connect with constraint projection.

    All tolerances are supplied by the caller; there are no hidden defaults
    beyond the constructor arguments.

    Args:
        interpolator: Interpolation rule for extension steps and edges
        metric: Configuration-space distance for nearest-neighbor queries
        bounds_testable: Joint-limit check applied to every new state
        max_extension_distance: Longest single extension step
        max_distance_btw_projections: Largest accepted displacement caused by
            one projection
        min_step_size: Steps shorter than this are rejected (no progress)
        min_tree_connection_distance: Trees are joined when nodes are closer
        collision_resolution: Discretization of edge validity checks
        goal_bias: Probability of drawing a new goal root each iteration
        max_iterations: Extension budget (None = bounded by time only)
        rng: Random source for goal biasing
    """

    def __init__(
        self,
        interpolator: Interpolator,
        metric: DistanceMetric,
        bounds_testable: Testable,
        max_extension_distance: float = 0.1,
        max_distance_btw_projections: float = 0.1,
        min_step_size: float = 1e-3,
        min_tree_connection_distance: float = 0.1,
        collision_resolution: float = 0.1,
        goal_bias: float = 0.1,
        max_iterations: int | None = None,
        rng: np.random.Generator | None = None,
    ):
        for name, value in (
            ("max_extension_distance", max_extension_distance),
            ("max_distance_btw_projections", max_distance_btw_projections),
            ("min_tree_connection_distance", min_tree_connection_distance),
            ("collision_resolution", collision_resolution),
        ):
            if value <= 0.0:
                raise ValueError(f"{name} must be positive, got {value}")
        if min_step_size < 0.0:
            raise ValueError(f"min_step_size must be non-negative, got {min_step_size}")
        if not 0.0 <= goal_bias <= 1.0:
            raise ValueError(f"goal_bias must be in [0, 1], got {goal_bias}")
        if max_iterations is not None and max_iterations < 0:
            raise ValueError(f"max_iterations must be non-negative, got {max_iterations}")
        if bounds_testable is None:
            raise TypeError("CRRTConnectPlanner requires a bounds Testable")

        self._interpolator = interpolator
        self._metric = metric
        self._bounds_testable = bounds_testable
        self._max_extension_distance = max_extension_distance
        self._max_distance_btw_projections = max_distance_btw_projections
        self._min_step_size = min_step_size
        self._min_tree_connection_distance = min_tree_connection_distance
        self._collision_resolution = collision_resolution
        self._goal_bias = goal_bias
        self._max_iterations = max_iterations
        self._rng = rng if rng is not None else np.random.default_rng()

    def plan(
        self,
        start: State,
        goal_sampleable: Sampleable,
        goal_testable: Testable,
        trajectory_constraint: Projectable,
        sampleable: Sampleable,
        collision_testable: Testable,
        timeout: float = 10.0,
    ) -> PlanningResult:
        """Plan a constrained path from start to any state satisfying goal_testable.

        Args:
            start: Start configuration
            goal_sampleable: Source of goal configurations (roots of the goal tree)
            goal_testable: Goal region test applied to every goal root
            trajectory_constraint: Projection applied to every new state
            sampleable: Source of random extension targets
            collision_testable: Collision check applied to states and edges
            timeout: Wall-clock budget in seconds

        Returns:
            PlanningResult; SUCCESS carries a trajectory start -> goal
        """
        for name, constraint in (
            ("goal_sampleable", goal_sampleable),
            ("goal_testable", goal_testable),
            ("trajectory_constraint", trajectory_constraint),
            ("sampleable", sampleable),
            ("collision_testable", collision_testable),
        ):
            if constraint is None:
                raise TypeError(f"CRRT-Connect requires {name}")
        if timeout < 0.0:
            raise ValueError(f"timeout must be non-negative, got {timeout}")

        start_time = time.monotonic()
        query = _Query(
            constraint=trajectory_constraint,
            validity=TestableIntersection([self._bounds_testable, collision_testable]),
            deadline=start_time + timeout,
        )

        q_start = np.array(start, dtype=np.float64)
        error = self._validate_start(q_start, query)
        if error is not None:
            return create_failure_result(
                PlanningStatus.INFEASIBLE, error, time.monotonic() - start_time
            )

        start_tree = Tree(self._metric)
        start_tree.add_root(q_start)
        goal_tree = Tree(self._metric)

        goal_generator = goal_sampleable.create_sample_generator()
        sample_generator = sampleable.create_sample_generator()

        active, other = start_tree, goal_tree
        iteration = 0

        while True:
            if query.expired():
                return create_failure_result(
                    PlanningStatus.TIMEOUT,
                    f"CRRT-Connect: time budget of {timeout:.3f}s elapsed after {iteration} "
                    f"iterations ({len(start_tree)} start / {len(goal_tree)} goal nodes)",
                    time.monotonic() - start_time,
                    iteration,
                )
            if self._max_iterations is not None and iteration >= self._max_iterations:
                return create_failure_result(
                    PlanningStatus.EXHAUSTED,
                    f"CRRT-Connect: extension budget of {self._max_iterations} iterations "
                    f"exhausted ({len(start_tree)} start / {len(goal_tree)} goal nodes)",
                    time.monotonic() - start_time,
                    iteration,
                )
            iteration += 1

            if len(goal_tree) == 0 or self._rng.random() < self._goal_bias:
                if goal_generator.can_sample():
                    self._add_goal_root(goal_tree, goal_generator, goal_testable, query)
                elif len(goal_tree) == 0:
                    return create_failure_result(
                        PlanningStatus.EXHAUSTED,
                        "CRRT-Connect: goal sampleable exhausted before a valid goal was found",
                        time.monotonic() - start_time,
                        iteration,
                    )
            if len(goal_tree) == 0:
                continue

            if not sample_generator.can_sample():
                return create_failure_result(
                    PlanningStatus.EXHAUSTED,
                    "CRRT-Connect: extension sampleable exhausted",
                    time.monotonic() - start_time,
                    iteration,
                )
            target = sample_generator.sample()
            if target is not None:
                path = self._grow_and_connect(active, other, target, query)
                if path is not None:
                    if active is goal_tree:
                        path.reverse()
                    logger.info(
                        "CRRT-Connect found path",
                        iterations=iteration,
                        start_nodes=len(start_tree),
                        goal_nodes=len(goal_tree),
                    )
                    return create_success_result(
                        path,
                        self._interpolator,
                        self._metric,
                        time.monotonic() - start_time,
                        iteration,
                        message="CRRT-Connect: trees connected",
                    )

            active, other = other, active

    def get_name(self) -> str:
        return "CRRTConnect"

    def _validate_start(self, q_start: State, query: _Query) -> str | None:
        """Return a diagnostic if the start state is unusable."""
        if not self._bounds_testable.is_satisfied(q_start):
            return "CRRT-Connect: start state violates joint limits"
        if not query.validity.is_satisfied(q_start):
            return "CRRT-Connect: start state is in collision"
        projected = query.constraint.project(q_start)
        # The start is the root of the path, so projection must leave it in place
        if projected is None or self._metric.distance(q_start, projected) > self._min_step_size:
            return "CRRT-Connect: start state does not satisfy the trajectory constraint"
        return None

    def _add_goal_root(
        self,
        goal_tree: Tree,
        goal_generator: SampleGenerator,
        goal_testable: Testable,
        query: _Query,
    ) -> int | None:
        """Draw a goal sample, project it and add it as a root if still valid."""
        sample = goal_generator.sample()
        if sample is None:
            return None
        projected = query.constraint.project(sample)
        if projected is None:
            return None
        if not goal_testable.is_satisfied(projected) or not query.validity.is_satisfied(projected):
            return None
        logger.debug("CRRT-Connect added goal root", roots=goal_tree.num_roots() + 1)
        return goal_tree.add_root(projected)

    def _grow_and_connect(
        self,
        active: Tree,
        other: Tree,
        target: State,
        query: _Query,
    ) -> list[State] | None:
        """One extension of `active` toward target, then a connect attempt from `other`.

        Returns the joined path (active root -> other root) on success.
        """
        new_index, _ = self._extend(active, active.nearest(target), target, query)
        if new_index is None:
            return None

        q_new = active.config(new_index)
        reached, connected = self._connect(other, other.nearest(q_new), q_new, query)
        if not connected:
            return None

        q_reached = other.config(reached)
        if not is_segment_valid(
            q_new,
            q_reached,
            query.validity,
            self._interpolator,
            self._metric,
            self._collision_resolution,
        ):
            return None

        path = active.path_to_root(new_index)
        tail = list(reversed(other.path_to_root(reached)))
        if self._metric.distance(path[-1], tail[0]) == 0.0:
            tail = tail[1:]
        return path + tail

    def _extend(
        self,
        tree: Tree,
        from_index: int,
        target: State,
        query: _Query,
    ) -> tuple[int | None, float]:
        """Take one bounded, projected step from a node toward target.

        Returns (index of the new node or None if rejected, step length).
        """
        q_from = tree.config(from_index)
        distance = self._metric.distance(q_from, target)
        if distance == 0.0:
            return None, 0.0

        alpha = min(1.0, self._max_extension_distance / distance)
        q_step = self._interpolator.interpolate(q_from, target, alpha)

        q_new = query.constraint.project(q_step)
        if q_new is None:
            return None, 0.0
        if self._metric.distance(q_step, q_new) > self._max_distance_btw_projections:
            return None, 0.0

        step = self._metric.distance(q_from, q_new)
        if step < self._min_step_size:
            return None, step

        if not query.validity.is_satisfied(q_new):
            return None, step
        if not is_segment_valid(
            q_from,
            q_new,
            query.validity,
            self._interpolator,
            self._metric,
            self._collision_resolution,
            skip_start=True,
        ):
            return None, step

        return tree.add_node(q_new, from_index), step

    def _connect(
        self,
        tree: Tree,
        from_index: int,
        target: State,
        query: _Query,
    ) -> tuple[int, bool]:
        """Repeatedly extend from a node toward target.

        Stops with success once within min_tree_connection_distance; abandons
        when a step is rejected, the distance stops decreasing, or time is up.
        Returns (last node reached, connected).
        """
        current = from_index
        previous_distance = np.inf

        while not query.expired():
            distance = self._metric.distance(tree.config(current), target)
            if distance < self._min_tree_connection_distance:
                return current, True
            if distance >= previous_distance:
                return current, False
            previous_distance = distance

            new_index, _ = self._extend(tree, current, target, query)
            if new_index is None:
                return current, False
            current = new_index

        return current, False


def plan_crrt_connect(
    start: State,
    goal_testable: Testable,
    goal_sampleable: Sampleable,
    trajectory_constraint: Projectable,
    interpolator: Interpolator,
    metric: DistanceMetric,
    sampleable: Sampleable,
    collision_testable: Testable,
    bounds_testable: Testable,
    timeout: float,
    max_extension_distance: float,
    max_distance_btw_projections: float,
    min_step_size: float,
    min_tree_connection_distance: float,
    collision_resolution: float = 0.1,
    goal_bias: float = 0.1,
    max_iterations: int | None = None,
    rng: np.random.Generator | None = None,
) -> PlanningResult:
    """Function form of CRRTConnectPlanner with every tolerance explicit."""
    planner = CRRTConnectPlanner(
        interpolator=interpolator,
        metric=metric,
        bounds_testable=bounds_testable,
        max_extension_distance=max_extension_distance,
        max_distance_btw_projections=max_distance_btw_projections,
        min_step_size=min_step_size,
        min_tree_connection_distance=min_tree_connection_distance,
        collision_resolution=collision_resolution,
        goal_bias=goal_bias,
        max_iterations=max_iterations,
        rng=rng,
    )
    return planner.plan(
        start,
        goal_sampleable=goal_sampleable,
        goal_testable=goal_testable,
        trajectory_constraint=trajectory_constraint,
        sampleable=sampleable,
        collision_testable=collision_testable,
        timeout=timeout,
    )
