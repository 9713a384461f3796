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

"""Conjunction of Testable constraints."""

from __future__ import annotations

from collections.abc import Sequence
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from tsrplan.spec import State, Testable


class TestableIntersection:
    """Satisfied iff every member is satisfied. Members are tested in order."""

    __test__ = False  # not a pytest test class

    def __init__(self, testables: Sequence[Testable]):
        if not testables:
            raise ValueError("TestableIntersection requires at least one Testable")
        for testable in testables:
            if testable is None:
                raise TypeError("TestableIntersection received a None constraint")
        self._testables = list(testables)

    def is_satisfied(self, state: State) -> bool:
        return all(testable.is_satisfied(state) for testable in self._testables)
