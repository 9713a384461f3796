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
Transform Utilities

Helpers for 4x4 homogeneous transforms (isometries) and the intrinsic
X-Y-Z Euler angle parameterization used by Task Space Regions.

Rotations are built and decomposed with scipy's Rotation so every module
shares one Euler convention.
"""

from __future__ import annotations

from typing import TYPE_CHECKING
import warnings

import numpy as np
from scipy.spatial.transform import Rotation as R

if TYPE_CHECKING:
    from numpy.typing import ArrayLike, NDArray

EULER_SEQUENCE = "XYZ"
"""Intrinsic rotations about x, then y, then z (R = Rx @ Ry @ Rz)"""


def wrap_angle_to_interval(angle: float, lower: float, upper: float) -> float:
    """Shift angle by multiples of 2*pi to lie in, or nearest to, [lower, upper].

    Used so that a rotation coordinate is compared with its bounds using the
    representation closest to them, e.g. 3.1 against [-3.2, -3.0].
    """
    if lower <= angle <= upper:
        return angle

    if np.isfinite(lower) and np.isfinite(upper):
        center = 0.5 * (lower + upper)
    elif np.isfinite(lower):
        center = lower
    elif np.isfinite(upper):
        center = upper
    else:
        return angle

    turns = round((center - angle) / (2.0 * np.pi))
    best = angle
    best_gap = _interval_gap(angle, lower, upper)
    for k in (turns - 1, turns, turns + 1):
        candidate = angle + 2.0 * np.pi * k
        gap = _interval_gap(candidate, lower, upper)
        if gap < best_gap:
            best, best_gap = candidate, gap
    return float(best)


def _interval_gap(value: float, lower: float, upper: float) -> float:
    if value < lower:
        return lower - value
    if value > upper:
        return value - upper
    return 0.0


def make_isometry(
    rotation: ArrayLike | None = None,
    translation: ArrayLike | None = None,
) -> NDArray[np.float64]:
    """Build a 4x4 transform from a 3x3 rotation and a translation."""
    T = np.eye(4)
    if rotation is not None:
        T[:3, :3] = np.asarray(rotation, dtype=np.float64)
    if translation is not None:
        T[:3, 3] = np.asarray(translation, dtype=np.float64)
    return T


def invert_isometry(T: NDArray[np.float64]) -> NDArray[np.float64]:
    """Invert a rigid transform without a general matrix inverse."""
    R_T = T[:3, :3].T
    inverse = np.eye(4)
    inverse[:3, :3] = R_T
    inverse[:3, 3] = -R_T @ T[:3, 3]
    return inverse


def xyzrpy_to_isometry(xyzrpy: ArrayLike) -> NDArray[np.float64]:
    """Convert [x, y, z, roll, pitch, yaw] to a 4x4 transform."""
    values = np.asarray(xyzrpy, dtype=np.float64)
    rotation = R.from_euler(EULER_SEQUENCE, values[3:6]).as_matrix()
    return make_isometry(rotation, values[:3])


def isometry_to_xyzrpy(T: NDArray[np.float64]) -> NDArray[np.float64]:
    """Convert a 4x4 transform to [x, y, z, roll, pitch, yaw]."""
    # At pitch = +-pi/2 scipy zeroes yaw and warns; callers resolve the split
    with warnings.catch_warnings():
        warnings.filterwarnings("ignore", message="Gimbal lock detected")
        rpy = R.from_matrix(T[:3, :3]).as_euler(EULER_SEQUENCE)
    return np.concatenate([T[:3, 3], rpy])


def euler_rate_matrix(roll: float, pitch: float) -> NDArray[np.float64]:
    """Map intrinsic XYZ Euler angle rates to angular velocity.

    For R = Rx(roll) @ Ry(pitch) @ Rz(yaw), the angular velocity expressed in
    the parent frame is E @ [roll_dot, pitch_dot, yaw_dot]. E is singular at
    pitch = +-pi/2.
    """
    sr, cr = np.sin(roll), np.cos(roll)
    sp, cp = np.sin(pitch), np.cos(pitch)
    return np.array(
        [
            [1.0, 0.0, sp],
            [0.0, cr, -sr * cp],
            [0.0, sr, cr * cp],
        ]
    )


def rotation_between_vectors(
    from_vector: ArrayLike,
    to_vector: ArrayLike,
) -> NDArray[np.float64]:
    """Smallest rotation taking the direction of from_vector onto to_vector.

    Args:
        from_vector: Source direction (non-zero)
        to_vector: Target direction (non-zero)

    Returns:
        3x3 rotation matrix
    """
    a = np.asarray(from_vector, dtype=np.float64)
    b = np.asarray(to_vector, dtype=np.float64)
    a = a / np.linalg.norm(a)
    b = b / np.linalg.norm(b)

    axis = np.cross(a, b)
    sin_angle = float(np.linalg.norm(axis))
    cos_angle = float(np.clip(np.dot(a, b), -1.0, 1.0))

    if sin_angle < 1e-12:
        if cos_angle > 0.0:
            return np.eye(3)
        # Antiparallel: rotate by pi about any axis orthogonal to a
        helper = np.array([1.0, 0.0, 0.0]) if abs(a[0]) < 0.9 else np.array([0.0, 1.0, 0.0])
        axis = np.cross(a, helper)
        axis /= np.linalg.norm(axis)
        return R.from_rotvec(axis * np.pi).as_matrix()

    angle = np.arctan2(sin_angle, cos_angle)
    return R.from_rotvec(axis / sin_angle * angle).as_matrix()
