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

"""Joint-limit constraints: uniform sampling, bounds test and clipping."""

from __future__ import annotations

from typing import TYPE_CHECKING

import numpy as np

if TYPE_CHECKING:
    from numpy.typing import ArrayLike, NDArray

    from tsrplan.spec import RobotModel, State


def _as_limits(
    lower: ArrayLike, upper: ArrayLike
) -> tuple[NDArray[np.float64], NDArray[np.float64]]:
    lower_arr = np.asarray(lower, dtype=np.float64)
    upper_arr = np.asarray(upper, dtype=np.float64)
    if lower_arr.shape != upper_arr.shape:
        raise ValueError(
            f"Limit shapes differ: lower {lower_arr.shape}, upper {upper_arr.shape}"
        )
    if np.any(lower_arr > upper_arr):
        raise ValueError("Lower joint limits must not exceed upper joint limits")
    return lower_arr, upper_arr


class _UniformSampleGenerator:
    def __init__(
        self,
        lower: NDArray[np.float64],
        upper: NDArray[np.float64],
        rng: np.random.Generator,
    ):
        self._lower = lower
        self._upper = upper
        self._rng = rng

    def can_sample(self) -> bool:
        return True

    def sample(self) -> State:
        return self._rng.uniform(self._lower, self._upper)


class JointLimitSampleable:
    """Uniform samples within finite joint limits."""

    def __init__(self, lower: ArrayLike, upper: ArrayLike, rng: np.random.Generator):
        self._lower, self._upper = _as_limits(lower, upper)
        if not (np.all(np.isfinite(self._lower)) and np.all(np.isfinite(self._upper))):
            raise ValueError("Cannot sample uniformly from unbounded joint limits")
        self._rng = rng

    def create_sample_generator(self) -> _UniformSampleGenerator:
        return _UniformSampleGenerator(self._lower, self._upper, self._rng)


class JointLimitTestable:
    """Satisfied iff every joint lies within its (inclusive) limits."""

    def __init__(self, lower: ArrayLike, upper: ArrayLike):
        self._lower, self._upper = _as_limits(lower, upper)

    def is_satisfied(self, state: State) -> bool:
        q = np.asarray(state, dtype=np.float64)
        return bool(np.all(q >= self._lower) and np.all(q <= self._upper))


class JointLimitProjectable:
    """Projects onto the joint-limit box by clipping. Never fails."""

    def __init__(self, lower: ArrayLike, upper: ArrayLike):
        self._lower, self._upper = _as_limits(lower, upper)

    def project(self, state: State) -> State:
        return np.clip(np.asarray(state, dtype=np.float64), self._lower, self._upper)


def create_sampleable_bounds(robot: RobotModel, rng: np.random.Generator) -> JointLimitSampleable:
    lower, upper = robot.get_joint_limits()
    return JointLimitSampleable(lower, upper, rng)


def create_testable_bounds(robot: RobotModel) -> JointLimitTestable:
    lower, upper = robot.get_joint_limits()
    return JointLimitTestable(lower, upper)


def create_projectable_bounds(robot: RobotModel) -> JointLimitProjectable:
    lower, upper = robot.get_joint_limits()
    return JointLimitProjectable(lower, upper)
