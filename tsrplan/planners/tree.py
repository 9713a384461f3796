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

"""Flat-arena search tree shared by the tree planners."""

from __future__ import annotations

from typing import TYPE_CHECKING

import numpy as np

if TYPE_CHECKING:
    from tsrplan.spec import DistanceMetric, State

NO_PARENT = -1


class Tree:
    """Append-only tree stored as parallel lists indexed by node id.

    Parents are stored as indices (NO_PARENT for a root), so a tree may hold
    several roots and path reconstruction is a walk over parent indices.
    """

    def __init__(self, metric: DistanceMetric):
        self._metric = metric
        self._configs: list[State] = []
        self._parents: list[int] = []
        self._costs: list[float] = []

    def __len__(self) -> int:
        return len(self._configs)

    def add_root(self, config: State) -> int:
        """Add a root node, returns its index."""
        return self._append(config, NO_PARENT, 0.0)

    def add_node(self, config: State, parent: int) -> int:
        """Add a child of `parent`, returns its index."""
        if not 0 <= parent < len(self._configs):
            raise IndexError(f"Parent index {parent} out of range")
        cost = self._costs[parent] + self._metric.distance(self._configs[parent], config)
        return self._append(config, parent, cost)

    def config(self, index: int) -> State:
        return self._configs[index]

    def parent(self, index: int) -> int:
        return self._parents[index]

    def cost(self, index: int) -> float:
        return self._costs[index]

    def num_roots(self) -> int:
        return sum(1 for parent in self._parents if parent == NO_PARENT)

    def nearest(self, target: State) -> int:
        """Index of the node closest to target under the tree's metric."""
        if not self._configs:
            raise ValueError("Nearest-neighbor query on an empty tree")
        return min(
            range(len(self._configs)),
            key=lambda i: self._metric.distance(self._configs[i], target),
        )

    def path_to_root(self, index: int) -> list[State]:
        """Configurations from the node's root down to the node."""
        path: list[State] = []
        node = index
        while node != NO_PARENT:
            path.append(self._configs[node])
            node = self._parents[node]
        return list(reversed(path))

    def _append(self, config: State, parent: int, cost: float) -> int:
        self._configs.append(np.array(config, dtype=np.float64))
        self._parents.append(parent)
        self._costs.append(cost)
        return len(self._configs) - 1
