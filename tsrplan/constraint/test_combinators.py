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

"""Tests for joint-limit constraints, combinators and the IK sampleable."""

from __future__ import annotations

import numpy as np
import pytest

from tsrplan.constraint import (
    TSR,
    CollisionFree,
    CyclicSampleable,
    FiniteSampleable,
    FrameTestable,
    InverseKinematicsSampleable,
    JointLimitProjectable,
    JointLimitSampleable,
    JointLimitTestable,
    TestableIntersection,
    create_projectable_bounds,
    create_sampleable_bounds,
    create_testable_bounds,
)
from tsrplan.kinematics import JacobianIK
from tsrplan.spec import Projectable, Sampleable, Testable
from tsrplan.utils.testing import DiscObstacle, PlanarArm
from tsrplan.utils.transform_utils import make_isometry


class _ScriptedGenerator:
    def __init__(self, script):
        self._script = list(script)

    def can_sample(self):
        return bool(self._script)

    def sample(self):
        return self._script.pop(0) if self._script else None


class _ScriptedSampleable:
    """Replays a fixed list of draws; None entries are misses."""

    def __init__(self, script):
        self._script = script

    def create_sample_generator(self):
        return _ScriptedGenerator(self._script)


class _Constant:
    def __init__(self, value):
        self.value = value
        self.calls = 0

    def is_satisfied(self, state):
        self.calls += 1
        return self.value


# =============================================================================
# Test Joint Limits
# =============================================================================


class TestJointLimits:
    """Test joint-limit sampleable, testable and projectable."""

    def test_samples_within_limits(self, rng):
        lower, upper = np.array([-1.0, 0.0]), np.array([1.0, 0.5])
        generator = JointLimitSampleable(lower, upper, rng).create_sample_generator()
        testable = JointLimitTestable(lower, upper)
        for _ in range(100):
            assert generator.can_sample()
            assert testable.is_satisfied(generator.sample())

    def test_testable_is_inclusive(self):
        testable = JointLimitTestable([-1.0, -1.0], [1.0, 1.0])
        assert testable.is_satisfied(np.array([1.0, -1.0]))
        assert not testable.is_satisfied(np.array([1.0 + 1e-9, 0.0]))

    def test_projectable_clips(self):
        projectable = JointLimitProjectable([-1.0, -1.0], [1.0, 1.0])
        np.testing.assert_allclose(projectable.project(np.array([2.0, -0.5])), [1.0, -0.5])

    def test_unbounded_limits_cannot_be_sampled(self, rng):
        with pytest.raises(ValueError, match="unbounded"):
            JointLimitSampleable([-np.inf], [np.inf], rng)

    def test_inverted_limits_raise(self):
        with pytest.raises(ValueError):
            JointLimitTestable([1.0], [-1.0])

    def test_robot_factories(self, arm, rng):
        assert isinstance(create_sampleable_bounds(arm, rng), Sampleable)
        assert isinstance(create_testable_bounds(arm), Testable)
        assert isinstance(create_projectable_bounds(arm), Projectable)
        assert not create_testable_bounds(arm).is_satisfied(np.array([4.0, 0.0, 0.0]))


# =============================================================================
# Test Combinators
# =============================================================================


class TestTestableIntersection:
    """Test conjunction of testables."""

    def test_all_must_hold(self):
        assert TestableIntersection([_Constant(True), _Constant(True)]).is_satisfied(None)
        assert not TestableIntersection([_Constant(True), _Constant(False)]).is_satisfied(None)

    def test_short_circuits_in_order(self):
        first, second = _Constant(False), _Constant(True)
        TestableIntersection([first, second]).is_satisfied(None)
        assert first.calls == 1
        assert second.calls == 0

    def test_configuration_errors(self):
        with pytest.raises(ValueError):
            TestableIntersection([])
        with pytest.raises(TypeError):
            TestableIntersection([_Constant(True), None])


class TestFiniteSampleable:
    """Test finite sample lists."""

    def test_yields_each_state_once(self):
        states = [np.array([0.0]), np.array([1.0])]
        generator = FiniteSampleable(states).create_sample_generator()

        np.testing.assert_allclose(generator.sample(), [0.0])
        np.testing.assert_allclose(generator.sample(), [1.0])
        assert not generator.can_sample()
        assert generator.sample() is None

    def test_generators_are_independent(self):
        sampleable = FiniteSampleable([np.array([0.0])])
        sampleable.create_sample_generator().sample()
        assert sampleable.create_sample_generator().can_sample()

    def test_empty_raises(self):
        with pytest.raises(ValueError):
            FiniteSampleable([])


class TestCyclicSampleable:
    """Test replay of previous draws on misses and exhaustion."""

    def test_miss_replays_previous_draw(self):
        a, b = np.array([1.0]), np.array([2.0])
        generator = CyclicSampleable(_ScriptedSampleable([a, None, b])).create_sample_generator()

        np.testing.assert_allclose(generator.sample(), a)
        np.testing.assert_allclose(generator.sample(), a)
        np.testing.assert_allclose(generator.sample(), b)

    def test_exhaustion_cycles_forever(self):
        states = [np.array([1.0]), np.array([2.0])]
        generator = CyclicSampleable(FiniteSampleable(states)).create_sample_generator()

        drawn = [float(generator.sample()[0]) for _ in range(6)]
        assert drawn[:2] == [1.0, 2.0]
        assert set(drawn[2:]) == {1.0, 2.0}
        assert generator.can_sample()

    def test_nothing_drawn_yet(self):
        generator = CyclicSampleable(_ScriptedSampleable([None])).create_sample_generator()
        assert generator.can_sample()
        assert generator.sample() is None
        assert not generator.can_sample()


# =============================================================================
# Test Collision
# =============================================================================


class TestCollisionFree:
    def test_reports_obstacle_contact(self):
        arm = PlanarArm(link_lengths=(1.0,), obstacles=[DiscObstacle((1.0, 0.0), 0.2)])
        testable = CollisionFree(arm)
        assert not testable.is_satisfied(np.array([0.0]))
        assert testable.is_satisfied(np.array([np.pi / 2]))


# =============================================================================
# Test Inverse Kinematics Sampleable
# =============================================================================


class TestInverseKinematicsSampleable:
    """Test joint-space sampling of pose constraints."""

    def test_samples_satisfy_the_pose_constraint(self, arm, rng):
        q_target = np.array([0.4, 0.3, -0.2])
        tsr = TSR(T0_w=arm.forward_kinematics(q_target), rng=rng)
        sampleable = InverseKinematicsSampleable(
            arm,
            tsr,
            create_sampleable_bounds(arm, rng),
            JacobianIK(),
            max_num_trials=5,
            initial_seed=np.array([0.3, 0.3, 0.0]),
        )

        generator = sampleable.create_sample_generator()
        q = generator.sample()
        assert q is not None
        assert FrameTestable(arm, tsr).is_satisfied(q)

    def test_unreachable_pose_is_a_miss(self, arm, rng):
        tsr = TSR(T0_w=make_isometry(translation=[10.0, 0.0, 0.0]), rng=rng)
        sampleable = InverseKinematicsSampleable(
            arm, tsr, create_sampleable_bounds(arm, rng), JacobianIK(max_iterations=20), 2
        )

        generator = sampleable.create_sample_generator()
        assert generator.sample() is None
        assert generator.can_sample()

    def test_configuration_errors(self, arm, rng):
        seeds = create_sampleable_bounds(arm, rng)
        with pytest.raises(ValueError):
            InverseKinematicsSampleable(arm, TSR(), seeds, JacobianIK(), 0)
        with pytest.raises(TypeError):
            InverseKinematicsSampleable(arm, None, seeds, JacobianIK(), 1)
