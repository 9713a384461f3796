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

"""PlanningResult constructors shared by the planners."""

from __future__ import annotations

from collections.abc import Sequence
from typing import TYPE_CHECKING

from tsrplan.spec import PlanningResult, PlanningStatus
from tsrplan.trajectory import InterpolatedTrajectory

if TYPE_CHECKING:
    from tsrplan.spec import DistanceMetric, Interpolator, State


def create_success_result(
    path: Sequence[State],
    interpolator: Interpolator,
    metric: DistanceMetric,
    planning_time: float,
    iterations: int,
    message: str = "Path found",
) -> PlanningResult:
    """Create a successful planning result with an arc-length parameterized trajectory."""
    trajectory = InterpolatedTrajectory.from_path(path, interpolator, metric)
    return PlanningResult(
        status=PlanningStatus.SUCCESS,
        trajectory=trajectory,
        planning_time=planning_time,
        path_length=trajectory.get_duration(),
        iterations=iterations,
        message=message,
    )


def create_failure_result(
    status: PlanningStatus,
    message: str,
    planning_time: float = 0.0,
    iterations: int = 0,
) -> PlanningResult:
    """Create a failed planning result."""
    return PlanningResult(
        status=status,
        trajectory=None,
        planning_time=planning_time,
        iterations=iterations,
        message=message,
    )
