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

"""Backend-agnostic Jacobian-based inverse kinematics.

JacobianIK only uses the RobotModel interface (forward_kinematics,
get_jacobian, get_joint_limits), so it works with any kinematics provider.
It is the default IK behind InverseKinematicsSampleable.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import numpy as np

from tsrplan.spec import IKResult, IKStatus
from tsrplan.utils.kinematics_utils import (
    check_singularity,
    compute_error_twist,
    compute_pose_error,
    damped_pseudoinverse,
)
from tsrplan.utils.logging_config import setup_logger

if TYPE_CHECKING:
    from numpy.typing import NDArray

    from tsrplan.spec import Isometry, RobotModel, State

logger = setup_logger()


class JacobianIK:
    """Iterative damped least-squares IK from a single seed.

    Random restarts are not done here; InverseKinematicsSampleable supplies
    a fresh seed per trial.

    Example:
        ik = JacobianIK(damping=0.01)
        result = ik.solve(robot, target_pose, seed=robot.get_positions())
        if result.is_success():
            print(f"Solution: {result.positions}")
    """

    def __init__(
        self,
        damping: float = 0.05,
        max_iterations: int = 200,
        singularity_threshold: float = 1e-6,
        position_tolerance: float = 1e-4,
        orientation_tolerance: float = 1e-4,
        max_delta: float = 0.1,
        check_collision: bool = False,
    ):
        """Create Jacobian IK solver.

        Args:
            damping: Damping factor for pseudoinverse (higher = more stable near singularities)
            max_iterations: Maximum iterations per solve
            singularity_threshold: Manipulability threshold for singularity detection
            position_tolerance: Required position accuracy (meters)
            orientation_tolerance: Required orientation accuracy (radians)
            max_delta: Largest joint change per iteration (radians)
            check_collision: Reject solutions the robot reports in collision
        """
        self._damping = damping
        self._max_iterations = max_iterations
        self._singularity_threshold = singularity_threshold
        self._position_tolerance = position_tolerance
        self._orientation_tolerance = orientation_tolerance
        self._max_delta = max_delta
        self._check_collision = check_collision

    def solve(self, robot: RobotModel, target_pose: Isometry, seed: State) -> IKResult:
        """Iterate Jacobian steps from seed until the pose error is within tolerance.

        Args:
            robot: Kinematics provider for FK and Jacobian
            target_pose: Target end-effector pose (4x4, world frame)
            seed: Initial joint configuration

        Returns:
            IKResult with solution or failure status
        """
        target = np.asarray(target_pose, dtype=np.float64)
        current_joints = np.array(seed, dtype=np.float64)
        lower_limits, upper_limits = robot.get_joint_limits()
        current_joints = np.clip(current_joints, lower_limits, upper_limits)

        pos_error = ori_error = float("inf")
        for iteration in range(self._max_iterations):
            current_pose = robot.forward_kinematics(current_joints)
            pos_error, ori_error = compute_pose_error(current_pose, target)

            if pos_error <= self._position_tolerance and ori_error <= self._orientation_tolerance:
                if self._check_collision and not robot.is_collision_free(current_joints):
                    return _create_failure_result(
                        IKStatus.COLLISION, "IK solution is in collision", iteration + 1
                    )
                return _create_success_result(current_joints, pos_error, ori_error, iteration + 1)

            twist = compute_error_twist(current_pose, target, gain=0.5)
            J = robot.get_jacobian(current_joints)

            # Increase damping near singularity instead of failing
            if check_singularity(J, threshold=self._singularity_threshold):
                effective_damping = self._damping * 10.0
            else:
                effective_damping = self._damping

            q_dot = damped_pseudoinverse(J, effective_damping) @ twist

            max_change = float(np.max(np.abs(q_dot)))
            if max_change > self._max_delta:
                q_dot = q_dot * (self._max_delta / max_change)

            current_joints = np.clip(current_joints + q_dot, lower_limits, upper_limits)

        return _create_failure_result(
            IKStatus.NO_SOLUTION,
            f"Did not converge after {self._max_iterations} iterations "
            f"(pos_err={pos_error:.4f}, ori_err={ori_error:.4f})",
            self._max_iterations,
        )


# ============= Result Helpers =============


def _create_success_result(
    joint_positions: NDArray[np.float64],
    position_error: float,
    orientation_error: float,
    iterations: int,
) -> IKResult:
    return IKResult(
        status=IKStatus.SUCCESS,
        positions=joint_positions.copy(),
        position_error=position_error,
        orientation_error=orientation_error,
        iterations=iterations,
        message="IK solution found",
    )


def _create_failure_result(status: IKStatus, message: str, iterations: int = 0) -> IKResult:
    return IKResult(status=status, positions=None, iterations=iterations, message=message)
