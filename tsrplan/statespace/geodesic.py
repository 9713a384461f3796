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

"""Distance metric and interpolation for real-vector joint spaces."""

from __future__ import annotations

from typing import TYPE_CHECKING

import numpy as np

if TYPE_CHECKING:
    from numpy.typing import ArrayLike

    from tsrplan.spec import State


class EuclideanDistanceMetric:
    """Weighted Euclidean distance between joint vectors.

    With unit weights this is the plain L2 norm used for nearest-neighbor
    queries and path lengths.
    """

    def __init__(self, weights: ArrayLike | None = None):
        if weights is None:
            self._weights = None
        else:
            self._weights = np.asarray(weights, dtype=np.float64)
            if np.any(self._weights <= 0.0):
                raise ValueError("Distance weights must be positive")

    def distance(self, a: State, b: State) -> float:
        diff = np.asarray(b, dtype=np.float64) - np.asarray(a, dtype=np.float64)
        if self._weights is not None:
            diff = diff * np.sqrt(self._weights)
        return float(np.linalg.norm(diff))


class LinearInterpolator:
    """Geodesic interpolation in R^n: a + alpha * (b - a)."""

    def interpolate(self, a: State, b: State, alpha: float) -> State:
        start = np.asarray(a, dtype=np.float64)
        end = np.asarray(b, dtype=np.float64)
        if alpha <= 0.0:
            return start.copy()
        if alpha >= 1.0:
            return end.copy()
        return start + alpha * (end - start)
