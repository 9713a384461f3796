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

"""Tests for the flat-arena tree."""

from __future__ import annotations

import numpy as np
import pytest

from tsrplan.planners import NO_PARENT, Tree


class TestTree:
    def test_roots_and_children(self, metric):
        tree = Tree(metric)
        root = tree.add_root(np.array([0.0, 0.0]))
        child = tree.add_node(np.array([3.0, 4.0]), root)
        grandchild = tree.add_node(np.array([3.0, 5.0]), child)

        assert len(tree) == 3
        assert tree.parent(root) == NO_PARENT
        assert tree.parent(grandchild) == child
        assert tree.cost(grandchild) == pytest.approx(6.0)

    def test_path_to_root_runs_root_first(self, metric):
        tree = Tree(metric)
        root = tree.add_root(np.array([0.0]))
        a = tree.add_node(np.array([1.0]), root)
        b = tree.add_node(np.array([2.0]), a)

        path = tree.path_to_root(b)
        assert [float(q[0]) for q in path] == [0.0, 1.0, 2.0]

    def test_multiple_roots(self, metric):
        tree = Tree(metric)
        tree.add_root(np.array([0.0]))
        second = tree.add_root(np.array([10.0]))
        leaf = tree.add_node(np.array([9.0]), second)

        assert tree.num_roots() == 2
        assert [float(q[0]) for q in tree.path_to_root(leaf)] == [10.0, 9.0]

    def test_nearest(self, metric):
        tree = Tree(metric)
        tree.add_root(np.array([0.0, 0.0]))
        far = tree.add_root(np.array([5.0, 5.0]))
        assert tree.nearest(np.array([4.0, 4.5])) == far

    def test_stored_configs_are_copies(self, metric):
        tree = Tree(metric)
        q = np.array([1.0])
        index = tree.add_root(q)
        q[0] = 2.0
        assert tree.config(index)[0] == 1.0

    def test_errors(self, metric):
        tree = Tree(metric)
        with pytest.raises(ValueError):
            tree.nearest(np.array([0.0]))
        with pytest.raises(IndexError):
            tree.add_node(np.array([0.0]), 0)
