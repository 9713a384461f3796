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

"""Task Space Regions.

A TSR is a bounded set of end-effector poses:

    T0_e = T0_w @ Tw(xyzrpy) @ Tw_e,    Bw[:, 0] <= xyzrpy <= Bw[:, 1]

where T0_w places the TSR frame w in the world, Tw_e is the end-effector
offset in that frame and Bw (6 x 2) bounds the translation (x, y, z) and the
intrinsic XYZ Euler angles (roll, pitch, yaw) of the displacement Tw.

The TSR is Sampleable (poses), Testable (poses) and Differentiable with
respect to the end-effector's world-frame twist. FrameTestable and
FrameDifferentiable in tsrplan.constraint.frame lift it to joint space.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import numpy as np

from tsrplan.utils.kinematics_utils import skew_symmetric
from tsrplan.utils.transform_utils import (
    euler_rate_matrix,
    invert_isometry,
    isometry_to_xyzrpy,
    wrap_angle_to_interval,
    xyzrpy_to_isometry,
)

if TYPE_CHECKING:
    from numpy.typing import ArrayLike, NDArray

    from tsrplan.spec import Bounds, Isometry

TSR_DIMENSION = 6
# Distance of pitch from +-pi/2 below which roll and yaw are coupled
GIMBAL_LOCK_TOLERANCE = 1e-6


class TSRSampleGenerator:
    """Draws poses uniformly (per coordinate) from a TSR's bounds.

    Unbounded unless max_samples is given. A TSR with an infinite
    translation bound cannot be sampled.
    """

    def __init__(self, tsr: TSR, rng: np.random.Generator, max_samples: int | None = None):
        self._tsr = tsr
        self._rng = rng
        self._max_samples = max_samples
        self._num_samples = 0
        self._lower, self._upper = tsr.get_sampling_bounds()

    def can_sample(self) -> bool:
        if not (np.all(np.isfinite(self._lower)) and np.all(np.isfinite(self._upper))):
            return False
        return self._max_samples is None or self._num_samples < self._max_samples

    def sample(self) -> Isometry | None:
        if not self.can_sample():
            return None
        self._num_samples += 1
        xyzrpy = self._rng.uniform(self._lower, self._upper)
        return self._tsr.pose_from_xyzrpy(xyzrpy)


class TSR:
    """Task Space Region over end-effector poses.

    Args:
        T0_w: Pose of the TSR frame in the world (default identity)
        Tw_e: End-effector offset in the TSR frame (default identity)
        Bw: 6 x 2 bounds, rows [x, y, z, roll, pitch, yaw], columns [min, max]
            (default all zero, i.e. the single pose T0_w @ Tw_e)
        testable_tolerance: Slack added to every bound when testing containment
        rng: Random source for sampling
        max_samples: Limit on samples drawn per generator (None = unbounded)
    """

    def __init__(
        self,
        T0_w: ArrayLike | None = None,
        Tw_e: ArrayLike | None = None,
        Bw: ArrayLike | None = None,
        testable_tolerance: float = 1e-3,
        rng: np.random.Generator | None = None,
        max_samples: int | None = None,
    ):
        self.T0_w = np.eye(4) if T0_w is None else np.array(T0_w, dtype=np.float64)
        self.Tw_e = np.eye(4) if Tw_e is None else np.array(Tw_e, dtype=np.float64)
        self.Bw: Bounds = (
            np.zeros((TSR_DIMENSION, 2)) if Bw is None else np.array(Bw, dtype=np.float64)
        )
        self.testable_tolerance = testable_tolerance
        self.max_samples = max_samples
        self._rng = rng if rng is not None else np.random.default_rng()
        self.validate()

    def validate(self) -> None:
        """Raise ValueError if the transforms or bounds are malformed."""
        for name, T in (("T0_w", self.T0_w), ("Tw_e", self.Tw_e)):
            if T.shape != (4, 4):
                raise ValueError(f"{name} must be a 4x4 transform, got shape {T.shape}")
        if self.Bw.shape != (TSR_DIMENSION, 2):
            raise ValueError(f"Bw must have shape (6, 2), got {self.Bw.shape}")
        if np.any(np.isnan(self.Bw)):
            raise ValueError("Bw must not contain NaN")
        if np.any(self.Bw[:, 0] > self.Bw[:, 1]):
            raise ValueError(f"Lower bound exceeds upper bound in Bw:\n{self.Bw}")
        if self.testable_tolerance < 0.0:
            raise ValueError("testable_tolerance must be non-negative")

    # ============= Sampleable =============

    def create_sample_generator(self) -> TSRSampleGenerator:
        return TSRSampleGenerator(self, self._rng, self.max_samples)

    def get_sampling_bounds(self) -> tuple[NDArray[np.float64], NDArray[np.float64]]:
        """Bounds used for sampling; full-turn rotation ranges clamp to [-pi, pi]."""
        lower = self.Bw[:, 0].copy()
        upper = self.Bw[:, 1].copy()
        for i in range(3, 6):
            if upper[i] - lower[i] >= 2.0 * np.pi:
                lower[i], upper[i] = -np.pi, np.pi
        return lower, upper

    def pose_from_xyzrpy(self, xyzrpy: ArrayLike) -> Isometry:
        """World pose of the end-effector for TSR coordinates xyzrpy."""
        result: Isometry = self.T0_w @ xyzrpy_to_isometry(xyzrpy) @ self.Tw_e
        return result

    # ============= Testable =============

    def get_coordinates(self, pose: Isometry) -> NDArray[np.float64]:
        """TSR coordinates [x, y, z, roll, pitch, yaw] of an end-effector pose.

        Of the two Euler triples describing the rotation, the one closest to
        the bounds is returned, with each angle shifted by multiples of 2*pi
        toward its bound interval.
        """
        Tw = invert_isometry(self.T0_w) @ np.asarray(pose, dtype=np.float64) @ invert_isometry(
            self.Tw_e
        )
        xyzrpy = isometry_to_xyzrpy(Tw)
        if abs(abs(xyzrpy[4]) - np.pi / 2) < GIMBAL_LOCK_TOLERANCE:
            return self._get_locked_coordinates(Tw, xyzrpy)
        roll, pitch, yaw = xyzrpy[3:]
        alternate = np.array([roll + np.pi, np.pi - pitch, yaw + np.pi])

        best = xyzrpy
        best_violation = np.inf
        for rpy in (xyzrpy[3:], alternate):
            candidate = xyzrpy.copy()
            for k, i in enumerate(range(3, 6)):
                candidate[i] = wrap_angle_to_interval(rpy[k], self.Bw[i, 0], self.Bw[i, 1])
            violation = float(np.sum(np.abs(self._excess(candidate))))
            if violation < best_violation:
                best, best_violation = candidate, violation
        return best

    def _get_locked_coordinates(
        self, Tw: NDArray[np.float64], xyzrpy: NDArray[np.float64]
    ) -> NDArray[np.float64]:
        """Coordinates at pitch = +-pi/2, where only roll + yaw (or roll - yaw) is fixed.

        The combined angle is wrapped toward the combined bounds, then split
        with roll clamped into its interval and the remainder assigned to yaw.
        """
        sign = 1.0 if xyzrpy[4] > 0.0 else -1.0
        # Rx(c) @ Ry(+-pi/2): row 1 is [+-sin(c), cos(c), 0]
        combined = float(np.arctan2(sign * Tw[1, 0], Tw[1, 1]))
        roll_lo, roll_hi = self.Bw[3]
        yaw_lo, yaw_hi = self.Bw[5] if sign > 0.0 else -self.Bw[5, ::-1]

        combined = wrap_angle_to_interval(combined, roll_lo + yaw_lo, roll_hi + yaw_hi)
        lower = max(roll_lo, combined - yaw_hi)
        upper = min(roll_hi, combined - yaw_lo)
        if lower <= upper:
            roll = float(np.clip(combined, lower, upper))
        else:
            roll = roll_lo if combined < roll_lo + yaw_lo else roll_hi

        coordinates = xyzrpy.copy()
        coordinates[3] = roll
        coordinates[4] = wrap_angle_to_interval(xyzrpy[4], self.Bw[4, 0], self.Bw[4, 1])
        coordinates[5] = sign * (combined - roll)
        return coordinates

    def is_satisfied(self, pose: Isometry) -> bool:
        xyzrpy = self.get_coordinates(pose)
        tol = self.testable_tolerance
        return bool(
            np.all(xyzrpy >= self.Bw[:, 0] - tol) and np.all(xyzrpy <= self.Bw[:, 1] + tol)
        )

    # ============= Differentiable =============

    def get_constraint_dimension(self) -> int:
        return TSR_DIMENSION

    def get_value(self, pose: Isometry) -> NDArray[np.float64]:
        """Signed excess of each coordinate beyond its bounds (zero inside)."""
        return self._excess(self.get_coordinates(pose))

    def get_jacobian(self, pose: Isometry) -> NDArray[np.float64]:
        """Derivative of get_value with respect to the end-effector twist.

        The twist is [v, w] of the end-effector origin in world coordinates,
        matching the rows of RobotModel.get_jacobian. Rows of coordinates
        that are within bounds are zero.
        """
        pose = np.asarray(pose, dtype=np.float64)
        xyzrpy = self.get_coordinates(pose)
        R_w0 = self.T0_w[:3, :3].T

        # Point tracked by the TSR translation: end-effector origin shifted by inv(Tw_e)
        offset = pose[:3, :3] @ invert_isometry(self.Tw_e)[:3, 3]

        J = np.zeros((TSR_DIMENSION, TSR_DIMENSION))
        J[:3, :3] = R_w0
        J[:3, 3:] = -R_w0 @ skew_symmetric(offset)
        J[3:, 3:] = np.linalg.pinv(euler_rate_matrix(xyzrpy[3], xyzrpy[4])) @ R_w0

        active = self._excess(xyzrpy) != 0.0
        J[~active, :] = 0.0
        return J

    def _excess(self, xyzrpy: NDArray[np.float64]) -> NDArray[np.float64]:
        lower, upper = self.Bw[:, 0], self.Bw[:, 1]
        value = np.zeros(TSR_DIMENSION)
        below = xyzrpy < lower
        above = xyzrpy > upper
        value[below] = xyzrpy[below] - lower[below]
        value[above] = xyzrpy[above] - upper[above]
        return value

    def __repr__(self) -> str:
        return f"TSR(T0_w={self.T0_w.tolist()}, Tw_e={self.Tw_e.tolist()}, Bw={self.Bw.tolist()})"
