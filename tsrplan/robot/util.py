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

"""
Planning Façade

High-level entry points that plan for a RobotModel from its live
configuration. Every entry point holds ``robot.mutex`` for the whole call
and restores the robot's joint positions on every exit path.

## Entry Points

- plan_to_configuration: snap, then the sampling-planner adaptor
- plan_to_configurations: the same against several candidate goals
- plan_to_tsr: goal configurations sampled from a TSR through IK
- plan_to_tsr_with_trajectory_constraint: CRRT-Connect with a TSR goal and
  a TSR the end-effector must stay in along the whole path
- plan_to_end_effector_offset_by_crrt: straight end-effector motion along a
  direction, planned with CRRT-Connect
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import replace
from typing import IO, TYPE_CHECKING, Any

import numpy as np
import yaml

from tsrplan.config import PlanningSettings
from tsrplan.constraint import (
    TSR,
    CyclicSampleable,
    FrameDifferentiable,
    FrameTestable,
    InverseKinematicsSampleable,
    NewtonsMethodProjectable,
    TestableIntersection,
    create_sampleable_bounds,
    create_testable_bounds,
)
from tsrplan.kinematics import JacobianIK
from tsrplan.planners import CRRTConnectPlanner, RRTConnectPlanner, SnapPlanner
from tsrplan.robot.fallback import FallbackChain, TimeBudget
from tsrplan.spec import CRRTPlannerParameters, PlanningResult, PlanningStatus
from tsrplan.statespace import EuclideanDistanceMetric, LinearInterpolator, locked_robot
from tsrplan.utils.logging_config import setup_logger
from tsrplan.utils.transform_utils import invert_isometry, make_isometry, rotation_between_vectors

if TYPE_CHECKING:
    from numpy.typing import ArrayLike, NDArray

    from tsrplan.spec import (
        InverseKinematicsSpec,
        Isometry,
        PlannerSpec,
        RobotModel,
        Sampleable,
        State,
        Testable,
    )

logger = setup_logger()


def _resolve_settings(settings: PlanningSettings | None) -> PlanningSettings:
    return settings if settings is not None else PlanningSettings()


# =============================================================================
# Configuration Goals
# =============================================================================


def plan_to_configuration(
    robot: RobotModel,
    goal: ArrayLike,
    collision_testable: Testable,
    rng: np.random.Generator,
    timelimit: float,
    settings: PlanningSettings | None = None,
    planner: PlannerSpec | None = None,
) -> PlanningResult:
    """Plan from the robot's current configuration to goal.

    The direct segment is tried first; if it is infeasible the sampling
    planner (RRT-Connect unless `planner` is given) runs with the remaining
    time.

    Args:
        robot: Robot to plan for
        goal: Goal configuration
        collision_testable: Collision check (joint limits are added here)
        rng: Random source for the sampling planner
        timelimit: Wall-clock budget in seconds
        settings: Façade settings (collision resolution)
        planner: General sampling planner used when the snap misses

    Returns:
        PlanningResult; on failure the message lists every stage attempted
    """
    return plan_to_configurations(
        robot, [goal], collision_testable, rng, timelimit, settings=settings, planner=planner
    )


def plan_to_configurations(
    robot: RobotModel,
    goals: Sequence[ArrayLike],
    collision_testable: Testable,
    rng: np.random.Generator,
    timelimit: float,
    settings: PlanningSettings | None = None,
    planner: PlannerSpec | None = None,
) -> PlanningResult:
    """Plan to whichever of several goal configurations is reached first.

    The snap planner is tried against every goal before any tree search;
    the sampling planner then searches toward all goals at once.
    """
    if collision_testable is None:
        raise TypeError("A collision Testable is required")
    goal_list = [np.array(goal, dtype=np.float64) for goal in goals]
    if not goal_list:
        raise ValueError("At least one goal configuration is required")

    with locked_robot(robot):
        start = robot.get_positions()
        return _plan_from(
            robot,
            start,
            goal_list,
            collision_testable,
            rng,
            TimeBudget(timelimit),
            _resolve_settings(settings),
            planner,
        )


def _plan_from(
    robot: RobotModel,
    start: State,
    goals: list[State],
    collision_testable: Testable,
    rng: np.random.Generator,
    budget: TimeBudget,
    settings: PlanningSettings,
    planner: PlannerSpec | None,
) -> PlanningResult:
    """Snap-then-search fallback chain; the caller holds the robot lock."""
    for goal in goals:
        if goal.shape != start.shape:
            raise ValueError(f"Goal shape {goal.shape} does not match start shape {start.shape}")

    interpolator = LinearInterpolator()
    metric = EuclideanDistanceMetric()
    testable = TestableIntersection([create_testable_bounds(robot), collision_testable])
    snap = SnapPlanner(interpolator, metric, settings.collision_resolution)
    if planner is None:
        planner = RRTConnectPlanner(
            interpolator,
            metric,
            collision_resolution=settings.collision_resolution,
            rng=rng,
        )
    sampleable = create_sampleable_bounds(robot, rng)

    def snap_to_any_goal(remaining: float) -> PlanningResult:
        result = snap.plan(start, goals[0], testable)
        for goal in goals[1:]:
            if result.is_success():
                break
            result = snap.plan(start, goal, testable)
        return result

    def search(remaining: float) -> PlanningResult:
        return planner.plan(start, goals, sampleable, testable, timeout=remaining)

    chain = FallbackChain()
    chain.add("snap", snap_to_any_goal, requires_time=False)
    chain.add(planner.get_name(), search)
    result = chain.run(budget)

    logger.debug(
        "Planned to configuration",
        status=result.status.name,
        goals=len(goals),
        planning_time=round(result.planning_time, 4),
    )
    return result


# =============================================================================
# TSR Goals
# =============================================================================


def plan_to_tsr(
    robot: RobotModel,
    tsr: TSR,
    collision_testable: Testable,
    rng: np.random.Generator,
    timelimit: float,
    max_num_trials: int,
    settings: PlanningSettings | None = None,
    ik: InverseKinematicsSpec | None = None,
    planner: PlannerSpec | None = None,
) -> PlanningResult:
    """Plan to any configuration whose end-effector pose lies in the TSR.

    Goal configurations come from IK on poses sampled from the TSR. Up to
    `settings.max_snap_samples` of them are tried with the snap planner
    first; afterwards each new goal sample gets a full planning attempt with
    at most timelimit / max_num_trials seconds.
    """
    if tsr is None or collision_testable is None:
        raise TypeError("A TSR and a collision Testable are required")
    if max_num_trials < 1:
        raise ValueError(f"max_num_trials must be at least 1, got {max_num_trials}")
    settings = _resolve_settings(settings)

    with locked_robot(robot):
        start = robot.get_positions()
        budget = TimeBudget(timelimit)

        ik_sampleable = InverseKinematicsSampleable(
            robot,
            tsr,
            create_sampleable_bounds(robot, rng),
            ik if ik is not None else JacobianIK(),
            max_num_trials,
            initial_seed=start,
        )
        generator = ik_sampleable.create_sample_generator()

        snap = SnapPlanner(
            LinearInterpolator(), EuclideanDistanceMetric(), settings.collision_resolution
        )
        testable = TestableIntersection([create_testable_bounds(robot), collision_testable])

        snap_samples = 0
        while (
            snap_samples < settings.max_snap_samples
            and generator.can_sample()
            and not budget.expired()
        ):
            snap_samples += 1
            goal = generator.sample()
            if goal is None:
                continue
            robot.set_positions(start)

            result = snap.plan(start, goal, testable)
            if result.is_success():
                logger.info("Snap reached TSR goal", samples=snap_samples)
                return replace(result, planning_time=budget.elapsed())

        time_per_sample = timelimit / max_num_trials
        planned_samples = 0
        while not budget.expired() and generator.can_sample():
            goal = generator.sample()
            if goal is None:
                continue
            robot.set_positions(start)
            planned_samples += 1

            result = _plan_from(
                robot,
                start,
                [goal],
                collision_testable,
                rng,
                TimeBudget(min(time_per_sample, budget.remaining())),
                settings,
                planner,
            )
            if result.is_success():
                logger.info("Planned to TSR goal", samples=planned_samples)
                return replace(result, planning_time=budget.elapsed())

        status = PlanningStatus.TIMEOUT if budget.expired() else PlanningStatus.EXHAUSTED
        return PlanningResult(
            status=status,
            planning_time=budget.elapsed(),
            message=(
                f"TSR: no plan after {snap_samples} snap samples and "
                f"{planned_samples} planned samples ({status.name.lower()})"
            ),
        )


def plan_to_tsr_with_trajectory_constraint(
    robot: RobotModel,
    goal_tsr: TSR,
    constraint_tsr: TSR,
    collision_testable: Testable,
    timelimit: float,
    crrt_parameters: CRRTPlannerParameters,
    settings: PlanningSettings | None = None,
    ik: InverseKinematicsSpec | None = None,
) -> PlanningResult:
    """Plan into goal_tsr while the end-effector stays inside constraint_tsr.

    Every waypoint of the returned path is the output of a Newton projection
    onto constraint_tsr, so it satisfies the constraint to within
    `crrt_parameters.projection_tolerance` per TSR coordinate.
    """
    if goal_tsr is None or constraint_tsr is None or collision_testable is None:
        raise TypeError("Goal TSR, constraint TSR and collision Testable are required")
    if crrt_parameters is None:
        raise TypeError("CRRTPlannerParameters are required")
    settings = _resolve_settings(settings)
    params = crrt_parameters
    ik = ik if ik is not None else JacobianIK()

    with locked_robot(robot):
        start = robot.get_positions()
        seed_sampleable = create_sampleable_bounds(robot, params.rng)

        goal_sampleable = InverseKinematicsSampleable(
            robot,
            CyclicSampleable(goal_tsr),
            seed_sampleable,
            ik,
            params.max_num_trials,
            initial_seed=start,
        )
        goal_testable = FrameTestable(robot, goal_tsr)

        constraint_sampleable: Sampleable
        if constraint_tsr.create_sample_generator().can_sample():
            constraint_sampleable = InverseKinematicsSampleable(
                robot,
                constraint_tsr,
                seed_sampleable,
                ik,
                params.max_num_trials,
            )
        else:
            # Unbounded translation: extend toward joint-space samples instead
            constraint_sampleable = seed_sampleable

        differentiable = FrameDifferentiable(robot, constraint_tsr)
        projectable = NewtonsMethodProjectable(
            differentiable,
            np.full(differentiable.get_constraint_dimension(), params.projection_tolerance),
            max_iterations=params.projection_max_iteration,
        )

        planner = CRRTConnectPlanner(
            interpolator=LinearInterpolator(),
            metric=EuclideanDistanceMetric(),
            bounds_testable=create_testable_bounds(robot),
            max_extension_distance=params.max_extension_distance,
            max_distance_btw_projections=params.max_distance_btw_projections,
            min_step_size=params.min_step_size,
            min_tree_connection_distance=params.min_tree_connection_distance,
            collision_resolution=settings.collision_resolution,
            goal_bias=params.goal_bias,
            max_iterations=params.max_iterations,
            rng=params.rng,
        )
        result = planner.plan(
            start,
            goal_sampleable=goal_sampleable,
            goal_testable=goal_testable,
            trajectory_constraint=projectable,
            sampleable=constraint_sampleable,
            collision_testable=collision_testable,
            timeout=timelimit,
        )

    logger.info(
        "Planned with trajectory constraint",
        status=result.status.name,
        planning_time=round(result.planning_time, 4),
    )
    return result


# =============================================================================
# End-Effector Offsets
# =============================================================================


def plan_to_end_effector_offset_by_crrt(
    robot: RobotModel,
    direction: ArrayLike,
    collision_testable: Testable,
    distance: float,
    timelimit: float,
    position_tolerance: float | None = None,
    angular_tolerance: float | None = None,
    crrt_parameters: CRRTPlannerParameters | None = None,
    settings: PlanningSettings | None = None,
    ik: InverseKinematicsSpec | None = None,
) -> PlanningResult:
    """Move the end-effector `distance` along `direction` in a straight line.

    A negative distance moves against the direction. The end-effector's
    orientation and its offset from the line are held within the given
    tolerances (settings defaults when None).
    """
    direction_vector = np.array(direction, dtype=np.float64)
    norm = float(np.linalg.norm(direction_vector))
    if norm == 0.0:
        raise ValueError("Direction must be a non-zero vector")
    direction_vector /= norm
    if distance < 0.0:
        direction_vector = -direction_vector
        distance = -distance

    settings = _resolve_settings(settings)
    if position_tolerance is None:
        position_tolerance = settings.offset_position_tolerance
    if angular_tolerance is None:
        angular_tolerance = settings.offset_angular_tolerance
    if crrt_parameters is None:
        crrt_parameters = CRRTPlannerParameters()

    with locked_robot(robot):
        goal_tsr, constraint_tsr = get_goal_and_constraint_tsr_for_end_effector_offset(
            robot.get_end_effector_transform(),
            direction_vector,
            distance,
            position_tolerance,
            angular_tolerance,
            rng=crrt_parameters.rng,
        )
        return plan_to_tsr_with_trajectory_constraint(
            robot,
            goal_tsr,
            constraint_tsr,
            collision_testable,
            timelimit,
            crrt_parameters,
            settings=settings,
            ik=ik,
        )


def get_goal_and_constraint_tsr_for_end_effector_offset(
    ee_pose: Isometry,
    direction: ArrayLike,
    distance: float,
    position_tolerance: float = 1e-3,
    angular_tolerance: float = 1e-3,
    rng: np.random.Generator | None = None,
) -> tuple[TSR, TSR]:
    """Goal and constraint TSRs for a straight end-effector offset.

    Frame w sits at the end-effector with its z-axis along `direction`. The
    goal is the end-effector pose moved `distance` along w's z-axis; the
    constraint allows [0, distance] along z and the given tolerances on the
    other translations and on all rotations.
    """
    ee_pose = np.asarray(ee_pose, dtype=np.float64)
    H_world_w = get_look_at_isometry(ee_pose[:3, 3], direction)
    H_w_ee = invert_isometry(H_world_w) @ ee_pose

    Hw_end = make_isometry(translation=[0.0, 0.0, distance])
    goal = TSR(T0_w=H_world_w @ Hw_end, Tw_e=H_w_ee, rng=rng)

    Bw = np.array(
        [
            [-position_tolerance, position_tolerance],
            [-position_tolerance, position_tolerance],
            [0.0, distance],
            [-angular_tolerance, angular_tolerance],
            [-angular_tolerance, angular_tolerance],
            [-angular_tolerance, angular_tolerance],
        ]
    )
    constraint = TSR(T0_w=H_world_w, Tw_e=H_w_ee, Bw=Bw, rng=rng)
    return goal, constraint


def get_look_at_isometry(position_from: ArrayLike, position_to: ArrayLike) -> Isometry:
    """Frame at position_from whose z-axis points along the vector position_to.

    Raises:
        ValueError: If position_to is (nearly) the zero vector
    """
    direction = np.asarray(position_to, dtype=np.float64)
    if np.linalg.norm(direction) < 1e-6:
        raise ValueError("position_to cannot be a zero vector")
    rotation = rotation_between_vectors([0.0, 0.0, 1.0], direction)
    return make_isometry(rotation, position_from)


# =============================================================================
# Named Configurations
# =============================================================================


def parse_yaml_to_named_configurations(
    node: str | IO[str] | Mapping[str, Any],
) -> dict[str, NDArray[np.float64]]:
    """Read a mapping of configuration name to joint vector.

    Example YAML:
        home: [0.0, 0.5, -0.5]
        stow: [1.57, 0.0, 0.0]

    Args:
        node: YAML text, an open stream, or an already-parsed mapping

    Returns:
        Dict of name -> configuration array
    """
    data = node if isinstance(node, Mapping) else yaml.safe_load(node)
    if data is None:
        return {}
    if not isinstance(data, Mapping):
        raise ValueError(f"Expected a mapping of named configurations, got {type(data).__name__}")

    configurations: dict[str, NDArray[np.float64]] = {}
    for name, values in data.items():
        try:
            configuration = np.array(values, dtype=np.float64)
        except (TypeError, ValueError) as e:
            raise ValueError(f"Configuration '{name}' is not a numeric vector") from e
        if configuration.ndim != 1:
            raise ValueError(f"Configuration '{name}' must be a flat list of joint values")
        configurations[str(name)] = configuration
    return configurations
