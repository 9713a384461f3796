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

"""Tests for state-space collaborators and robot state scoping."""

from __future__ import annotations

import threading

import numpy as np
import pytest

from tsrplan.spec import DistanceMetric, Interpolator, RobotModel
from tsrplan.statespace import (
    EuclideanDistanceMetric,
    LinearInterpolator,
    RobotStateSaver,
    locked_robot,
)


class TestGeodesic:
    def test_protocols(self, interpolator, metric):
        assert isinstance(interpolator, Interpolator)
        assert isinstance(metric, DistanceMetric)

    def test_weighted_distance(self):
        metric = EuclideanDistanceMetric(weights=[4.0, 1.0])
        assert metric.distance(np.zeros(2), np.array([1.0, 0.0])) == pytest.approx(2.0)
        with pytest.raises(ValueError):
            EuclideanDistanceMetric(weights=[0.0, 1.0])

    def test_interpolation_endpoints_and_clamping(self):
        interpolator = LinearInterpolator()
        a, b = np.array([0.0, 2.0]), np.array([2.0, 0.0])
        np.testing.assert_allclose(interpolator.interpolate(a, b, 0.25), [0.5, 1.5])
        np.testing.assert_allclose(interpolator.interpolate(a, b, -1.0), a)
        np.testing.assert_allclose(interpolator.interpolate(a, b, 2.0), b)


class TestRobotStateSaver:
    """Test scoped save/restore of the live configuration."""

    def test_arm_is_a_robot_model(self, arm):
        assert isinstance(arm, RobotModel)

    def test_restores_positions(self, arm):
        before = arm.get_positions()
        with RobotStateSaver(arm):
            arm.forward_kinematics(np.array([1.0, 1.0, 1.0]))
            assert not np.allclose(arm.get_positions(), before)
        np.testing.assert_allclose(arm.get_positions(), before)

    def test_restores_on_exception(self, arm):
        before = arm.get_positions()
        with pytest.raises(RuntimeError):
            with RobotStateSaver(arm):
                arm.set_positions(np.zeros(3))
                raise RuntimeError("boom")
        np.testing.assert_allclose(arm.get_positions(), before)

    def test_locked_robot_holds_mutex(self, arm):
        acquired = []

        def try_acquire():
            got = arm.mutex.acquire(blocking=False)
            acquired.append(got)
            if got:
                arm.mutex.release()

        with locked_robot(arm):
            arm.set_positions(np.ones(3))
            worker = threading.Thread(target=try_acquire)
            worker.start()
            worker.join()

        assert acquired == [False]
        np.testing.assert_allclose(arm.get_positions(), [0.3, 0.4, 0.2])
