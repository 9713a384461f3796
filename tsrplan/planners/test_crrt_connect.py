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

"""Tests for constrained bi-directional RRT-Connect."""

from __future__ import annotations

import numpy as np
import pytest

from tsrplan.constraint import (
    FiniteSampleable,
    JointLimitSampleable,
    JointLimitTestable,
    NewtonsMethodProjectable,
    TestableIntersection,
)
from tsrplan.planners import CRRTConnectPlanner, plan_crrt_connect
from tsrplan.spec import PlanningStatus
from tsrplan.utils.testing import BoxObstacle, HorizontalLine, Near, Unconstrained

LOWER = np.array([-np.pi, -np.pi])
UPPER = np.array([np.pi, np.pi])


class _AlwaysFree:
    def is_satisfied(self, state):
        return True


# =============================================================================
# Fixtures
# =============================================================================


@pytest.fixture
def bounds():
    return JointLimitTestable(LOWER, UPPER)


@pytest.fixture
def planner(interpolator, metric, bounds, rng):
    return CRRTConnectPlanner(
        interpolator,
        metric,
        bounds,
        max_extension_distance=0.2,
        max_distance_btw_projections=0.2,
        min_step_size=1e-3,
        min_tree_connection_distance=0.1,
        collision_resolution=0.05,
        rng=rng,
    )


def _plan(planner, start, goal, rng, collision=None, constraint=None, timeout=30.0):
    return planner.plan(
        np.asarray(start, dtype=np.float64),
        goal_sampleable=FiniteSampleable([np.asarray(goal, dtype=np.float64)]),
        goal_testable=Near(goal),
        trajectory_constraint=constraint if constraint is not None else Unconstrained(),
        sampleable=JointLimitSampleable(LOWER, UPPER, rng),
        collision_testable=collision if collision is not None else _AlwaysFree(),
        timeout=timeout,
    )


# =============================================================================
# Test Success
# =============================================================================


class TestCRRTConnectSuccess:
    """Test paths found by CRRT-Connect."""

    def test_permissive_constraint_reaches_goal(self, planner, rng):
        """Free 2-DOF space with a permissive constraint: start to goal."""
        start, goal = [0.0, 0.0], [1.0, 1.0]
        result = _plan(planner, start, goal, rng)

        assert result.is_success()
        waypoints = result.trajectory.get_waypoints()
        np.testing.assert_allclose(waypoints[0], start)
        np.testing.assert_allclose(waypoints[-1], goal, atol=1e-6)
        assert result.path_length >= np.sqrt(2.0) - 1e-9

    def test_path_avoids_obstacle(self, planner, bounds, rng):
        """Every discretized state is within bounds and collision-free."""
        obstacle = BoxObstacle([-0.5, -1.5], [0.5, 1.5])
        result = _plan(planner, [-2.0, 0.0], [2.0, 0.0], rng, collision=obstacle)

        assert result.is_success()
        validity = TestableIntersection([bounds, obstacle])
        assert all(validity.is_satisfied(q) for q in result.trajectory.discretize(0.05))

    def test_waypoints_stay_on_constraint_manifold(self, planner, rng):
        """Every waypoint satisfies the projection tolerance."""
        tolerance = 1e-4
        projectable = NewtonsMethodProjectable(HorizontalLine(0.0), [tolerance])
        result = _plan(planner, [-1.0, 0.0], [1.0, 0.0], rng, constraint=projectable)

        assert result.is_success()
        for q in result.trajectory.get_waypoints():
            assert abs(q[1]) <= tolerance

    def test_same_seed_same_path(self, interpolator, metric, bounds):
        def run(seed):
            rng = np.random.default_rng(seed)
            planner = CRRTConnectPlanner(interpolator, metric, bounds, rng=rng)
            obstacle = BoxObstacle([-0.5, -1.0], [0.5, 1.0])
            return _plan(planner, [-2.0, 0.0], [2.0, 0.0], rng, collision=obstacle)

        first, second = run(7), run(7)
        assert first.is_success() and second.is_success()
        np.testing.assert_allclose(
            np.array(first.trajectory.get_waypoints()),
            np.array(second.trajectory.get_waypoints()),
        )

    def test_function_form(self, interpolator, metric, bounds, rng):
        goal = np.array([0.5, -0.5])
        result = plan_crrt_connect(
            np.zeros(2),
            goal_testable=Near(goal),
            goal_sampleable=FiniteSampleable([goal]),
            trajectory_constraint=Unconstrained(),
            interpolator=interpolator,
            metric=metric,
            sampleable=JointLimitSampleable(LOWER, UPPER, rng),
            collision_testable=_AlwaysFree(),
            bounds_testable=bounds,
            timeout=30.0,
            max_extension_distance=0.1,
            max_distance_btw_projections=0.1,
            min_step_size=1e-3,
            min_tree_connection_distance=0.1,
            rng=rng,
        )
        assert result.is_success()


# =============================================================================
# Test Termination
# =============================================================================


class TestCRRTConnectTermination:
    """Test failure statuses and termination."""

    def test_zero_timeout(self, planner, rng):
        result = _plan(planner, [0.0, 0.0], [1.0, 1.0], rng, timeout=0.0)
        assert result.status == PlanningStatus.TIMEOUT
        assert result.trajectory is None
        assert "time budget" in result.message
        assert result.iterations == 0

    def test_iteration_budget(self, interpolator, metric, bounds, rng):
        planner = CRRTConnectPlanner(interpolator, metric, bounds, max_iterations=5, rng=rng)
        # A wall between the trees keeps them from connecting
        wall = BoxObstacle([-0.1, -4.0], [0.1, 4.0])
        result = _plan(planner, [-2.0, 0.0], [2.0, 0.0], rng, collision=wall)

        assert result.status == PlanningStatus.EXHAUSTED
        assert result.iterations == 5

    def test_unreachable_goal_times_out(self, planner, rng):
        wall = BoxObstacle([-0.1, -4.0], [0.1, 4.0])
        result = _plan(planner, [-2.0, 0.0], [2.0, 0.0], rng, collision=wall, timeout=0.5)
        assert result.status == PlanningStatus.TIMEOUT
        assert result.iterations > 0
        assert 0.5 <= result.planning_time <= 1.5

    def test_goal_sampleable_exhausted(self, planner, rng):
        obstacle = BoxObstacle([1.5, -0.5], [2.5, 0.5])
        result = _plan(planner, [0.0, 0.0], [2.0, 0.0], rng, collision=obstacle)

        assert result.status == PlanningStatus.EXHAUSTED
        assert "goal" in result.message

    def test_invalid_start(self, planner, rng):
        result = _plan(planner, [4.0, 0.0], [1.0, 1.0], rng)
        assert result.status == PlanningStatus.INFEASIBLE
        assert "joint limits" in result.message

    def test_start_in_collision(self, planner, rng):
        obstacle = BoxObstacle([-0.5, -0.5], [0.5, 0.5])
        result = _plan(planner, [0.0, 0.0], [1.0, 1.0], rng, collision=obstacle)
        assert result.status == PlanningStatus.INFEASIBLE

    def test_start_off_constraint(self, planner, rng):
        projectable = NewtonsMethodProjectable(HorizontalLine(0.0), [1e-4], max_iterations=1)
        result = _plan(planner, [0.0, 2.0], [1.0, 0.0], rng, constraint=projectable)
        assert result.status == PlanningStatus.INFEASIBLE

    def test_start_slightly_off_constraint(self, planner, rng):
        # Projection would shift the start by 0.05, within max_distance_btw_projections
        projectable = NewtonsMethodProjectable(HorizontalLine(0.0), [1e-4])
        result = _plan(planner, [0.0, 0.05], [1.0, 0.0], rng, constraint=projectable)
        assert result.status == PlanningStatus.INFEASIBLE
        assert result.trajectory is None
        assert "trajectory constraint" in result.message


# =============================================================================
# Test Configuration
# =============================================================================


class TestCRRTConnectConfiguration:
    def test_invalid_parameters(self, interpolator, metric, bounds):
        with pytest.raises(ValueError):
            CRRTConnectPlanner(interpolator, metric, bounds, max_extension_distance=0.0)
        with pytest.raises(ValueError):
            CRRTConnectPlanner(interpolator, metric, bounds, goal_bias=1.5)
        with pytest.raises(TypeError):
            CRRTConnectPlanner(interpolator, metric, None)

    def test_missing_constraint(self, planner, rng):
        with pytest.raises(TypeError):
            planner.plan(
                np.zeros(2),
                goal_sampleable=FiniteSampleable([np.ones(2)]),
                goal_testable=Near(np.ones(2)),
                trajectory_constraint=None,
                sampleable=JointLimitSampleable(LOWER, UPPER, rng),
                collision_testable=_AlwaysFree(),
            )

    def test_negative_timeout(self, planner, rng):
        with pytest.raises(ValueError):
            _plan(planner, [0.0, 0.0], [1.0, 1.0], rng, timeout=-1.0)
