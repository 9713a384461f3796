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

"""Piecewise-interpolated, untimed trajectory."""

from __future__ import annotations

from bisect import bisect_right
from collections.abc import Sequence
from typing import TYPE_CHECKING

import numpy as np

from tsrplan.utils.path_utils import discretize_segment

if TYPE_CHECKING:
    from tsrplan.spec import DistanceMetric, Interpolator, State


class InterpolatedTrajectory:
    """Ordered waypoints joined by an interpolation rule.

    Waypoint times must be non-decreasing. Planners build trajectories with
    from_path(), which parameterizes by cumulative distance along the path,
    so the duration equals the path length.
    """

    def __init__(self, interpolator: Interpolator, metric: DistanceMetric):
        self._interpolator = interpolator
        self._metric = metric
        self._times: list[float] = []
        self._states: list[State] = []

    @classmethod
    def from_path(
        cls,
        path: Sequence[State],
        interpolator: Interpolator,
        metric: DistanceMetric,
    ) -> InterpolatedTrajectory:
        """Build a trajectory with time equal to arc length along path."""
        trajectory = cls(interpolator, metric)
        t = 0.0
        for i, state in enumerate(path):
            if i > 0:
                t += metric.distance(path[i - 1], state)
            trajectory.add_waypoint(t, state)
        return trajectory

    def add_waypoint(self, t: float, state: State) -> None:
        """Append a waypoint; t must not precede the last waypoint."""
        if self._times and t < self._times[-1]:
            raise ValueError(f"Waypoint time {t} precedes previous time {self._times[-1]}")
        self._times.append(float(t))
        self._states.append(np.array(state, dtype=np.float64))

    def get_num_waypoints(self) -> int:
        return len(self._states)

    def get_waypoint(self, index: int) -> State:
        return self._states[index].copy()

    def get_waypoints(self) -> list[State]:
        return [state.copy() for state in self._states]

    def get_waypoint_time(self, index: int) -> float:
        return self._times[index]

    def get_start_time(self) -> float:
        self._require_waypoints()
        return self._times[0]

    def get_end_time(self) -> float:
        self._require_waypoints()
        return self._times[-1]

    def get_duration(self) -> float:
        return self.get_end_time() - self.get_start_time()

    def get_length(self) -> float:
        """Path length under the trajectory's metric."""
        return sum(
            self._metric.distance(a, b)
            for a, b in zip(self._states[:-1], self._states[1:], strict=True)
        )

    def evaluate(self, t: float) -> State:
        """State at time t, clamped to the trajectory's time range."""
        self._require_waypoints()
        if t <= self._times[0]:
            return self._states[0].copy()
        if t >= self._times[-1]:
            return self._states[-1].copy()

        index = bisect_right(self._times, t) - 1
        t0, t1 = self._times[index], self._times[index + 1]
        if t1 == t0:
            return self._states[index + 1].copy()
        alpha = (t - t0) / (t1 - t0)
        return self._interpolator.interpolate(self._states[index], self._states[index + 1], alpha)

    def discretize(self, resolution: float) -> list[State]:
        """All states along the trajectory at most `resolution` apart."""
        self._require_waypoints()
        states: list[State] = [self._states[0].copy()]
        for a, b in zip(self._states[:-1], self._states[1:], strict=True):
            states.extend(
                discretize_segment(a, b, self._interpolator, self._metric, resolution)[1:]
            )
        return states

    def _require_waypoints(self) -> None:
        if not self._states:
            raise ValueError("Trajectory has no waypoints")
