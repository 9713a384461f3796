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

"""Sampleable combinators: finite sample lists and cyclic replay."""

from __future__ import annotations

from collections.abc import Sequence
from typing import TYPE_CHECKING

import numpy as np

if TYPE_CHECKING:
    from tsrplan.spec import SampleGenerator, Sampleable, State


class _FiniteSampleGenerator:
    def __init__(self, states: list[State]):
        self._states = states
        self._index = 0

    def can_sample(self) -> bool:
        return self._index < len(self._states)

    def sample(self) -> State | None:
        if not self.can_sample():
            return None
        state = self._states[self._index].copy()
        self._index += 1
        return state


class FiniteSampleable:
    """Yields each given state once, in order, then is exhausted."""

    def __init__(self, states: Sequence[State]):
        if len(states) == 0:
            raise ValueError("FiniteSampleable requires at least one state")
        self._states = [np.array(state, dtype=np.float64) for state in states]

    def create_sample_generator(self) -> _FiniteSampleGenerator:
        return _FiniteSampleGenerator(self._states)


class _CyclicSampleGenerator:
    def __init__(self, generator: SampleGenerator):
        self._generator = generator
        self._history: list[State] = []
        self._replay_index = 0

    def can_sample(self) -> bool:
        return self._generator.can_sample() or bool(self._history)

    def sample(self) -> State | None:
        # One attempt on the wrapped generator per call; a miss falls back to replay
        if self._generator.can_sample():
            state = self._generator.sample()
            if state is not None:
                self._history.append(np.array(state, dtype=np.float64))
                return state

        if not self._history:
            return None

        state = self._history[self._replay_index % len(self._history)]
        self._replay_index += 1
        return state.copy()


class CyclicSampleable:
    """Wraps a Sampleable so that misses and exhaustion are hidden.

    Every successful draw of the wrapped generator is remembered. When the
    wrapped generator misses (e.g. an IK trial limit) or can no longer
    sample, previously drawn samples are replayed cyclically. Each sample()
    call makes at most one attempt on the wrapped generator.
    """

    def __init__(self, sampleable: Sampleable):
        if sampleable is None:
            raise TypeError("CyclicSampleable requires a Sampleable")
        self._sampleable = sampleable

    def create_sample_generator(self) -> _CyclicSampleGenerator:
        return _CyclicSampleGenerator(self._sampleable.create_sample_generator())
