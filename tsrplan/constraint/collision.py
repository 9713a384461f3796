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

"""Collision-free constraint backed by the robot's collision checker."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from tsrplan.spec import RobotModel, State


class CollisionFree:
    """Satisfied iff the robot reports the configuration collision-free."""

    def __init__(self, robot: RobotModel):
        self._robot = robot

    def is_satisfied(self, state: State) -> bool:
        return bool(self._robot.is_collision_free(state))
