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

"""TSR constraints lifted to joint space through forward kinematics."""

from __future__ import annotations

from typing import TYPE_CHECKING

import numpy as np

if TYPE_CHECKING:
    from numpy.typing import NDArray

    from tsrplan.constraint.tsr import TSR
    from tsrplan.spec import RobotModel, State


class FrameTestable:
    """Satisfied iff the end-effector pose at a configuration lies in the TSR."""

    def __init__(self, robot: RobotModel, tsr: TSR):
        self._robot = robot
        self._tsr = tsr

    def is_satisfied(self, state: State) -> bool:
        return self._tsr.is_satisfied(self._robot.forward_kinematics(state))


class FrameDifferentiable:
    """TSR value of the end-effector pose, differentiated in joint space.

    J(q) = J_tsr(FK(q)) @ J_ee(q), where J_ee is the robot's world-frame
    geometric Jacobian.
    """

    def __init__(self, robot: RobotModel, tsr: TSR):
        self._robot = robot
        self._tsr = tsr

    def get_constraint_dimension(self) -> int:
        return self._tsr.get_constraint_dimension()

    def get_value(self, state: State) -> NDArray[np.float64]:
        return self._tsr.get_value(self._robot.forward_kinematics(state))

    def get_jacobian(self, state: State) -> NDArray[np.float64]:
        pose = self._robot.forward_kinematics(state)
        result: NDArray[np.float64] = self._tsr.get_jacobian(pose) @ self._robot.get_jacobian(
            state
        )
        return result
