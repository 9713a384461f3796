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

"""Tests for the fallback chain and time budget."""

from __future__ import annotations

import pytest

from tsrplan.robot import FallbackChain, TimeBudget
from tsrplan.spec import PlanningResult, PlanningStatus


class _FakeClock:
    def __init__(self):
        self.now = 100.0

    def __call__(self):
        return self.now


def _result(status, message="", iterations=1):
    trajectory = object() if status == PlanningStatus.SUCCESS else None
    return PlanningResult(
        status=status, trajectory=trajectory, iterations=iterations, message=message
    )


class TestTimeBudget:
    def test_remaining_and_expiry(self):
        clock = _FakeClock()
        budget = TimeBudget(2.0, clock=clock)
        assert budget.remaining() == pytest.approx(2.0)

        clock.now += 1.5
        assert budget.elapsed() == pytest.approx(1.5)
        assert budget.remaining() == pytest.approx(0.5)
        assert not budget.expired()

        clock.now += 1.0
        assert budget.remaining() == 0.0
        assert budget.expired()

    def test_negative_budget(self):
        with pytest.raises(ValueError):
            TimeBudget(-1.0)


class TestFallbackChain:
    """Test ordered strategies sharing one budget."""

    def test_first_success_wins(self):
        calls = []
        chain = FallbackChain()
        chain.add("a", lambda remaining: calls.append("a") or _result(PlanningStatus.INFEASIBLE))
        chain.add("b", lambda remaining: calls.append("b") or _result(PlanningStatus.SUCCESS))
        chain.add("c", lambda remaining: calls.append("c") or _result(PlanningStatus.SUCCESS))

        result = chain.run(TimeBudget(10.0))
        assert result.is_success()
        assert calls == ["a", "b"]
        assert result.iterations == 2

    def test_failure_lists_every_stage(self):
        chain = FallbackChain()
        chain.add("snap", lambda remaining: _result(PlanningStatus.INFEASIBLE, "blocked"))
        chain.add("search", lambda remaining: _result(PlanningStatus.EXHAUSTED, "no path"))

        result = chain.run(10.0)
        assert result.status == PlanningStatus.EXHAUSTED
        assert result.trajectory is None
        assert result.message == "snap: blocked; search: no path"

    def test_spent_budget_skips_timed_stages(self):
        clock = _FakeClock()
        budget = TimeBudget(1.0, clock=clock)
        calls = []

        def slow(remaining):
            calls.append("slow")
            clock.now += 5.0
            return _result(PlanningStatus.INFEASIBLE, "missed")

        chain = FallbackChain()
        chain.add("instant", slow, requires_time=False)
        chain.add(
            "search", lambda remaining: calls.append("search") or _result(PlanningStatus.SUCCESS)
        )

        result = chain.run(budget)
        assert calls == ["slow"]
        assert result.status == PlanningStatus.TIMEOUT
        assert "search: skipped" in result.message

    def test_remaining_time_is_passed(self):
        clock = _FakeClock()
        seen = []
        chain = FallbackChain()
        chain.add("a", lambda remaining: seen.append(remaining) or _result(PlanningStatus.SUCCESS))
        chain.run(TimeBudget(3.0, clock=clock))
        assert seen == [pytest.approx(3.0)]

    def test_stage_names_and_empty_chain(self):
        chain = FallbackChain()
        with pytest.raises(ValueError):
            chain.run(1.0)
        chain.add("a", lambda remaining: _result(PlanningStatus.SUCCESS))
        assert chain.get_stage_names() == ["a"]
        assert len(chain) == 1
