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
Kinematics Utilities

Stateless helpers shared by the IK solver and the Newton projection.

## Functions

- damped_pseudoinverse(): Damped least-squares pseudoinverse
- get_manipulability() / check_singularity(): Singularity measures
- compute_pose_error(): Position/orientation error between poses
- compute_error_twist(): World-frame twist reducing a pose error
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import numpy as np

if TYPE_CHECKING:
    from numpy.typing import NDArray

    from tsrplan.spec import Jacobian


def damped_pseudoinverse(
    J: NDArray[np.float64],
    damping: float = 0.01,
) -> NDArray[np.float64]:
    """Compute the damped pseudoinverse of an m x n matrix.

    Uses the damped least-squares formula:
        J_pinv = J^T @ (J @ J^T + λ²I)^(-1)

    Rows of J that are identically zero contribute nothing to the result, so
    constraints that are currently inactive can be passed as zero rows.

    Args:
        J: m x n matrix (Jacobian of a task or constraint)
        damping: Damping factor λ (higher = more regularization, more stable)

    Returns:
        n x m pseudoinverse matrix
    """
    JJT = J @ J.T
    I = np.eye(JJT.shape[0])
    result: NDArray[np.float64] = J.T @ np.linalg.solve(JJT + damping**2 * I, I)
    return result


def get_manipulability(J: Jacobian) -> float:
    """Manipulability measure sqrt(det(J @ J^T)); zero at a singularity."""
    det = np.linalg.det(J @ J.T)
    return float(np.sqrt(max(0.0, det)))


def check_singularity(J: Jacobian, threshold: float = 0.01) -> bool:
    """True if the manipulability measure is below threshold."""
    return get_manipulability(J) < threshold


def skew_symmetric(v: NDArray[np.float64]) -> NDArray[np.float64]:
    """Create skew-symmetric matrix [v]_x with [v]_x @ w = v cross w."""
    return np.array(
        [
            [0.0, -v[2], v[1]],
            [v[2], 0.0, -v[0]],
            [-v[1], v[0], 0.0],
        ]
    )


def rotation_matrix_to_axis_angle(R: NDArray[np.float64]) -> tuple[NDArray[np.float64], float]:
    """Convert rotation matrix to (unit axis, angle in radians)."""
    cos_angle = np.clip((np.trace(R) - 1) / 2, -1, 1)
    angle = float(np.arccos(cos_angle))

    if angle < 1e-6:
        return np.array([1.0, 0.0, 0.0]), 0.0

    if angle > np.pi - 1e-6:
        diag = np.diag(R)
        idx = int(np.argmax(diag))
        axis = np.zeros(3)
        axis[idx] = np.sqrt((diag[idx] + 1) / 2)
        if axis[idx] > 1e-12:
            for j in range(3):
                if j != idx:
                    axis[j] = R[idx, j] / (2 * axis[idx])
        return axis / np.linalg.norm(axis), angle

    axis = np.array(
        [
            R[2, 1] - R[1, 2],
            R[0, 2] - R[2, 0],
            R[1, 0] - R[0, 1],
        ]
    ) / (2 * np.sin(angle))
    return axis, angle


def compute_pose_error(
    current_pose: NDArray[np.float64],
    target_pose: NDArray[np.float64],
) -> tuple[float, float]:
    """Position (meters) and orientation (radians) error between two 4x4 poses."""
    position_error = float(np.linalg.norm(target_pose[:3, 3] - current_pose[:3, 3]))
    _, orientation_error = rotation_matrix_to_axis_angle(
        target_pose[:3, :3] @ current_pose[:3, :3].T
    )
    return position_error, orientation_error


def compute_error_twist(
    current_pose: NDArray[np.float64],
    target_pose: NDArray[np.float64],
    gain: float = 1.0,
) -> NDArray[np.float64]:
    """Twist [vx, vy, vz, wx, wy, wz] (world frame) moving current toward target.

    Args:
        current_pose: Current 4x4 homogeneous transform
        target_pose: Target 4x4 homogeneous transform
        gain: Proportional gain (higher = faster convergence, less stable)
    """
    pos_error = target_pose[:3, 3] - current_pose[:3, 3]
    axis, angle = rotation_matrix_to_axis_angle(target_pose[:3, :3] @ current_pose[:3, :3].T)
    twist: NDArray[np.float64] = np.concatenate([pos_error, axis * angle]) * gain
    return twist
