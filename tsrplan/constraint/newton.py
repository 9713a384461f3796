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

"""Newton's-method projection of a Differentiable constraint."""

from __future__ import annotations

from collections.abc import Sequence
from typing import TYPE_CHECKING

import numpy as np

from tsrplan.utils.kinematics_utils import damped_pseudoinverse

if TYPE_CHECKING:
    from tsrplan.spec import Differentiable, State


class NewtonsMethodProjectable:
    """Projects states onto the zero set of a Differentiable.

    Each iteration evaluates the constraint value; if every coordinate is
    within its tolerance the current state is returned. Otherwise the state
    is corrected by the damped least-squares step J_pinv @ value. Projection
    fails (returns None) when the step becomes shorter than min_step_size or
    max_iterations corrections did not converge.

    Args:
        differentiable: Constraint to project onto
        tolerance: Per-coordinate tolerance, one entry per constraint dimension
        max_iterations: Maximum number of corrections
        min_step_size: Smallest correction considered progress
        damping: Damping factor of the pseudoinverse
    """

    def __init__(
        self,
        differentiable: Differentiable,
        tolerance: Sequence[float],
        max_iterations: int = 20,
        min_step_size: float = 1e-5,
        damping: float = 1e-3,
    ):
        if differentiable is None:
            raise TypeError("NewtonsMethodProjectable requires a Differentiable")
        self._differentiable = differentiable

        self._tolerance = np.asarray(tolerance, dtype=np.float64)
        dimension = differentiable.get_constraint_dimension()
        if self._tolerance.shape != (dimension,):
            raise ValueError(
                f"Expected {dimension} tolerance values, got {self._tolerance.size}"
            )
        if np.any(self._tolerance < 0.0):
            raise ValueError("Projection tolerances must be non-negative")
        if max_iterations < 1:
            raise ValueError(f"max_iterations must be at least 1, got {max_iterations}")
        if min_step_size < 0.0:
            raise ValueError("min_step_size must be non-negative")

        self._max_iterations = max_iterations
        self._min_step_size = min_step_size
        self._damping = damping

    def project(self, state: State) -> State | None:
        q = np.array(state, dtype=np.float64)

        for _ in range(self._max_iterations):
            value = self._differentiable.get_value(q)
            if self._is_within_tolerance(value):
                return q

            J = self._differentiable.get_jacobian(q)
            step = damped_pseudoinverse(J, self._damping) @ value
            if float(np.linalg.norm(step)) < self._min_step_size:
                return None
            q = q - step

        if self._is_within_tolerance(self._differentiable.get_value(q)):
            return q
        return None

    def _is_within_tolerance(self, value: np.ndarray) -> bool:
        return bool(np.all(np.abs(value) <= self._tolerance))
