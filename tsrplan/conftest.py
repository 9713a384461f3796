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

import threading

import numpy as np
import pytest

from tsrplan.constraint import CollisionFree
from tsrplan.statespace import EuclideanDistanceMetric, LinearInterpolator
from tsrplan.utils.testing import DiscObstacle, PlanarArm

_seen_threads = set()
_seen_threads_lock = threading.RLock()

_skip_for = ["slow"]


def pytest_configure(config):
    config.addinivalue_line("markers", "slow: end-to-end planning tests")


@pytest.fixture(autouse=True)
def monitor_threads(request):
    # Skip monitoring for tests marked with specified markers
    if any(request.node.get_closest_marker(marker) for marker in _skip_for):
        yield
        return

    yield

    threads = [t for t in threading.enumerate() if t.name != "MainThread"]

    if not threads:
        return

    with _seen_threads_lock:
        new_leaks = [t for t in threads if t.ident not in _seen_threads]
        for t in threads:
            _seen_threads.add(t.ident)

    if not new_leaks:
        return

    thread_names = [t.name for t in new_leaks]

    pytest.fail(
        f"Non-closed threads before or during this test. The thread names: {thread_names}. "
        "Please look at the first test that fails and fix that."
    )


@pytest.fixture
def rng():
    """Seeded generator so planner runs are reproducible."""
    return np.random.default_rng(42)


@pytest.fixture
def interpolator():
    return LinearInterpolator()


@pytest.fixture
def metric():
    return EuclideanDistanceMetric()


@pytest.fixture
def arm():
    """Obstacle-free 3-link planar arm with unit links."""
    return PlanarArm(link_lengths=(1.0, 1.0, 1.0), positions=[0.3, 0.4, 0.2])


@pytest.fixture
def blocked_arm():
    """2-link planar arm whose straight-line path from +0.5 to -0.5 rad is blocked."""
    return PlanarArm(
        link_lengths=(1.0, 1.0),
        obstacles=[DiscObstacle(center=(1.5, 0.0), radius=0.3)],
        positions=[0.5, 0.0],
    )


@pytest.fixture
def collision_free(arm):
    return CollisionFree(arm)
