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

"""Scoped save/restore of a robot's live configuration."""

from __future__ import annotations

from contextlib import contextmanager
from typing import TYPE_CHECKING

import numpy as np

if TYPE_CHECKING:
    from collections.abc import Generator
    from types import TracebackType

    from tsrplan.spec import RobotModel


class RobotStateSaver:
    """Restore the robot's joint positions when the scope exits.

    Positions are captured on entry and written back on every exit path,
    including exceptions.

    Example:
        with RobotStateSaver(robot):
            robot.set_positions(q)  # scratch use of the live model
        # original positions are back
    """

    def __init__(self, robot: RobotModel):
        self._robot = robot
        self._saved: np.ndarray | None = None

    def __enter__(self) -> RobotStateSaver:
        self._saved = np.array(self._robot.get_positions(), dtype=np.float64)
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_value: BaseException | None,
        traceback: TracebackType | None,
    ) -> None:
        if self._saved is not None:
            self._robot.set_positions(self._saved)
            self._saved = None


@contextmanager
def locked_robot(robot: RobotModel) -> Generator[RobotModel, None, None]:
    """Hold the robot mutex and restore its configuration on exit."""
    with robot.mutex, RobotStateSaver(robot):
        yield robot
