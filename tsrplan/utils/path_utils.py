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
Path Utilities

Standalone functions for discretizing, checking and post-processing paths of
configuration-space states. They are shared by the snap planner, the tree
planners and the trajectory type.

## Functions

- discretize_segment(): States along a segment at a fixed resolution
- is_segment_valid(): Test every discretized state of a segment
- compute_path_length(): Total path length under a metric
- simplify_path(): Random shortcutting
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import TYPE_CHECKING

import numpy as np

if TYPE_CHECKING:
    from numpy.typing import NDArray

    from tsrplan.spec import DistanceMetric, Interpolator, State, Testable


def discretize_segment(
    start: State,
    end: State,
    interpolator: Interpolator,
    metric: DistanceMetric,
    resolution: float,
) -> list[State]:
    """Discretize the interpolated segment start -> end.

    Uses ceil(distance / resolution) equal intervals in the interpolation
    parameter, so consecutive states are at most `resolution` apart for an
    interpolator with uniform arc length. Both endpoints are included; a
    zero-length segment yields just [start].

    Args:
        start: Segment start state
        end: Segment end state
        interpolator: Interpolation rule
        metric: Distance used to size the discretization
        resolution: Maximum distance between consecutive states

    Returns:
        List of states [start, ..., end]
    """
    if resolution <= 0.0:
        raise ValueError(f"resolution must be positive, got {resolution}")

    distance = metric.distance(start, end)
    if distance == 0.0:
        return [np.array(start, dtype=np.float64)]

    num_steps = max(1, int(np.ceil(distance / resolution)))
    return [interpolator.interpolate(start, end, i / num_steps) for i in range(num_steps + 1)]


def is_segment_valid(
    start: State,
    end: State,
    testable: Testable,
    interpolator: Interpolator,
    metric: DistanceMetric,
    resolution: float,
    skip_start: bool = False,
) -> bool:
    """Check that every discretized state of a segment satisfies testable.

    Args:
        skip_start: Do not re-test `start` (already known valid, e.g. a tree node)
    """
    states = discretize_segment(start, end, interpolator, metric, resolution)
    if skip_start and len(states) > 1:
        states = states[1:]
    return all(testable.is_satisfied(state) for state in states)


def compute_path_length(path: Sequence[State], metric: DistanceMetric | None = None) -> float:
    """Sum of distances between consecutive waypoints (Euclidean if no metric)."""
    if len(path) <= 1:
        return 0.0

    length = 0.0
    for q_curr, q_next in zip(path[:-1], path[1:], strict=True):
        if metric is None:
            length += float(np.linalg.norm(np.asarray(q_next) - np.asarray(q_curr)))
        else:
            length += metric.distance(q_curr, q_next)
    return length


def simplify_path(
    path: Sequence[State],
    testable: Testable,
    interpolator: Interpolator,
    metric: DistanceMetric,
    rng: np.random.Generator,
    max_iterations: int = 100,
    resolution: float = 0.02,
) -> list[State]:
    """Simplify path by random shortcutting.

    Randomly picks two waypoints at least two apart and, if the direct
    segment between them is valid, removes the intermediate waypoints.
    """
    simplified = list(path)

    for _ in range(max_iterations):
        if len(simplified) <= 2:
            break

        i = int(rng.integers(0, len(simplified) - 2))
        j = int(rng.integers(i + 2, len(simplified)))

        if is_segment_valid(
            simplified[i], simplified[j], testable, interpolator, metric, resolution
        ):
            simplified = simplified[: i + 1] + simplified[j:]

    return simplified
