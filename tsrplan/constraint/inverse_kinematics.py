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

"""Joint-space sampling of a pose constraint through inverse kinematics."""

from __future__ import annotations

from typing import TYPE_CHECKING

import numpy as np

from tsrplan.utils.logging_config import setup_logger

if TYPE_CHECKING:
    from numpy.typing import ArrayLike

    from tsrplan.spec import (
        InverseKinematicsSpec,
        RobotModel,
        SampleGenerator,
        Sampleable,
        State,
    )

logger = setup_logger()


class _IKSampleGenerator:
    def __init__(
        self,
        robot: RobotModel,
        pose_generator: SampleGenerator,
        seed_generator: SampleGenerator,
        ik: InverseKinematicsSpec,
        max_num_trials: int,
        initial_seed: State | None,
    ):
        self._robot = robot
        self._pose_generator = pose_generator
        self._seed_generator = seed_generator
        self._ik = ik
        self._max_num_trials = max_num_trials
        self._initial_seed = initial_seed

    def can_sample(self) -> bool:
        return self._pose_generator.can_sample()

    def sample(self) -> State | None:
        if not self._pose_generator.can_sample():
            return None

        pose = self._pose_generator.sample()
        if pose is None:
            return None

        for trial in range(self._max_num_trials):
            if trial == 0 and self._initial_seed is not None:
                seed = self._initial_seed
            else:
                if not self._seed_generator.can_sample():
                    break
                seed = self._seed_generator.sample()
                if seed is None:
                    continue

            result = self._ik.solve(self._robot, pose, seed)
            if result.is_success() and result.positions is not None:
                return np.array(result.positions, dtype=np.float64)

        logger.debug("IK found no solution for sampled pose", trials=self._max_num_trials)
        return None


class InverseKinematicsSampleable:
    """Configurations whose end-effector pose is drawn from a pose Sampleable.

    Each sample() draws one pose and runs IK from up to max_num_trials seeds:
    first initial_seed (if given), then seeds drawn from seed_sampleable.
    An IK failure on every seed is a sample miss (None), not an error.

    Args:
        robot: Kinematics provider
        pose_sampleable: Sampleable over end-effector poses (e.g. a TSR)
        seed_sampleable: Sampleable over configurations used as IK seeds
        ik: IK solver
        max_num_trials: IK attempts per sampled pose
        initial_seed: Configuration tried as the first seed for every pose
    """

    def __init__(
        self,
        robot: RobotModel,
        pose_sampleable: Sampleable,
        seed_sampleable: Sampleable,
        ik: InverseKinematicsSpec,
        max_num_trials: int,
        initial_seed: ArrayLike | None = None,
    ):
        if pose_sampleable is None or seed_sampleable is None or ik is None:
            raise TypeError("InverseKinematicsSampleable requires pose/seed sampleables and IK")
        if max_num_trials < 1:
            raise ValueError(f"max_num_trials must be at least 1, got {max_num_trials}")
        self._robot = robot
        self._pose_sampleable = pose_sampleable
        self._seed_sampleable = seed_sampleable
        self._ik = ik
        self._max_num_trials = max_num_trials
        self._initial_seed = (
            None if initial_seed is None else np.array(initial_seed, dtype=np.float64)
        )

    def create_sample_generator(self) -> _IKSampleGenerator:
        return _IKSampleGenerator(
            self._robot,
            self._pose_sampleable.create_sample_generator(),
            self._seed_sampleable.create_sample_generator(),
            self._ik,
            self._max_num_trials,
            self._initial_seed,
        )
