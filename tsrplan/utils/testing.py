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

"""Lightweight RobotModel and constraint doubles for tests and examples.

PlanarArm is a serial chain of revolute joints rotating about the world
z-axis, with disc obstacles in the plane. Its kinematics are exact and
cheap, which makes it suitable for exercising the planners end to end.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
import threading
from typing import TYPE_CHECKING

import numpy as np

from tsrplan.utils.transform_utils import make_isometry

if TYPE_CHECKING:
    from numpy.typing import ArrayLike, NDArray

    from tsrplan.spec import Isometry, Jacobian, State


@dataclass(frozen=True)
class DiscObstacle:
    """Disc in the arm's plane: center (x, y) and radius."""

    center: tuple[float, float]
    radius: float

    def distance_to_segment(self, a: NDArray[np.float64], b: NDArray[np.float64]) -> float:
        c = np.asarray(self.center, dtype=np.float64)
        ab = b - a
        denom = float(ab @ ab)
        t = 0.0 if denom == 0.0 else float(np.clip((c - a) @ ab / denom, 0.0, 1.0))
        return float(np.linalg.norm(a + t * ab - c))


class PlanarArm:
    """Planar serial arm implementing RobotModel.

    Args:
        link_lengths: Length of each link; one revolute joint per link
        lower_limits: Lower joint limits (default -pi)
        upper_limits: Upper joint limits (default pi)
        obstacles: Disc obstacles in the plane
        positions: Initial joint positions (default zeros)
    """

    def __init__(
        self,
        link_lengths: Sequence[float] = (1.0, 1.0, 1.0),
        lower_limits: ArrayLike | None = None,
        upper_limits: ArrayLike | None = None,
        obstacles: Sequence[DiscObstacle] = (),
        positions: ArrayLike | None = None,
    ):
        self._link_lengths = np.asarray(link_lengths, dtype=np.float64)
        if self._link_lengths.ndim != 1 or self._link_lengths.size == 0:
            raise ValueError("PlanarArm needs at least one link")
        n = self._link_lengths.size

        self._lower = np.full(n, -np.pi) if lower_limits is None else np.array(lower_limits, float)
        self._upper = np.full(n, np.pi) if upper_limits is None else np.array(upper_limits, float)
        if self._lower.shape != (n,) or self._upper.shape != (n,):
            raise ValueError(f"Joint limits must have shape ({n},)")

        self._obstacles = list(obstacles)
        self._positions = np.zeros(n) if positions is None else np.array(positions, float)
        self._mutex = threading.RLock()

    # ============= RobotModel =============

    @property
    def mutex(self) -> threading.RLock:
        return self._mutex

    @property
    def dof(self) -> int:
        return int(self._link_lengths.size)

    def get_positions(self) -> State:
        return self._positions.copy()

    def set_positions(self, positions: State) -> None:
        q = np.array(positions, dtype=np.float64)
        if q.shape != (self.dof,):
            raise ValueError(f"Expected {self.dof} joint positions, got shape {q.shape}")
        self._positions = q

    def get_joint_limits(self) -> tuple[NDArray[np.float64], NDArray[np.float64]]:
        return self._lower.copy(), self._upper.copy()

    def forward_kinematics(self, positions: State) -> Isometry:
        """End-effector pose; like a full kinematic model, this moves the live state."""
        self.set_positions(positions)
        return self.get_end_effector_transform()

    def get_jacobian(self, positions: State) -> Jacobian:
        points = self.get_joint_points(positions)
        ee = points[-1]
        J = np.zeros((6, self.dof))
        for j in range(self.dof):
            r = ee - points[j]
            J[0, j] = -r[1]
            J[1, j] = r[0]
            J[5, j] = 1.0
        return J

    def get_end_effector_transform(self) -> Isometry:
        angle = float(np.sum(self._positions))
        c, s = np.cos(angle), np.sin(angle)
        rotation = np.array([[c, -s, 0.0], [s, c, 0.0], [0.0, 0.0, 1.0]])
        x, y = self.get_joint_points(self._positions)[-1]
        return make_isometry(rotation, [x, y, 0.0])

    def is_collision_free(self, positions: State) -> bool:
        points = self.get_joint_points(positions)
        for a, b in zip(points[:-1], points[1:], strict=True):
            for obstacle in self._obstacles:
                if obstacle.distance_to_segment(a, b) < obstacle.radius:
                    return False
        return True

    # ============= Geometry =============

    def get_joint_points(self, positions: State) -> NDArray[np.float64]:
        """(dof + 1) x 2 array: joint origins followed by the end-effector point."""
        angles = np.cumsum(np.asarray(positions, dtype=np.float64))
        steps = self._link_lengths[:, None] * np.column_stack([np.cos(angles), np.sin(angles)])
        return np.vstack([np.zeros(2), np.cumsum(steps, axis=0)])


# ============= Constraint doubles for 2-D joint spaces =============


class BoxObstacle:
    """Satisfied outside the axis-aligned box [lower, upper]."""

    def __init__(self, lower, upper):
        self.lower = np.asarray(lower, dtype=np.float64)
        self.upper = np.asarray(upper, dtype=np.float64)

    def is_satisfied(self, state):
        q = np.asarray(state)
        return not bool(np.all(q >= self.lower) and np.all(q <= self.upper))


class Near:
    """Satisfied within `tolerance` of a fixed state."""

    def __init__(self, target, tolerance=1e-6):
        self.target = np.asarray(target, dtype=np.float64)
        self.tolerance = tolerance

    def is_satisfied(self, state):
        return float(np.linalg.norm(np.asarray(state) - self.target)) <= self.tolerance


class Unconstrained:
    """Projection for a permissive trajectory constraint."""

    def project(self, state):
        return np.array(state, dtype=np.float64)


class HorizontalLine:
    """q[1] - height = 0; a 1-D manifold in the plane."""

    def __init__(self, height=0.0):
        self.height = height

    def get_constraint_dimension(self):
        return 1

    def get_value(self, state):
        return np.array([state[1] - self.height])

    def get_jacobian(self, state):
        return np.array([[0.0, 1.0]])
