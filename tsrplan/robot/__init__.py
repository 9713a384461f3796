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

"""
Robot-level planning

Façade entry points that plan from a RobotModel's live configuration, and
the fallback chain they use to share one time budget across planners.
"""

from tsrplan.robot.fallback import FallbackChain, FallbackStage, TimeBudget
from tsrplan.robot.util import (
    get_goal_and_constraint_tsr_for_end_effector_offset,
    get_look_at_isometry,
    parse_yaml_to_named_configurations,
    plan_to_configuration,
    plan_to_configurations,
    plan_to_end_effector_offset_by_crrt,
    plan_to_tsr,
    plan_to_tsr_with_trajectory_constraint,
)

__all__ = [
    "FallbackChain",
    "FallbackStage",
    "TimeBudget",
    "get_goal_and_constraint_tsr_for_end_effector_offset",
    "get_look_at_isometry",
    "parse_yaml_to_named_configurations",
    "plan_to_configuration",
    "plan_to_configurations",
    "plan_to_end_effector_offset_by_crrt",
    "plan_to_tsr",
    "plan_to_tsr_with_trajectory_constraint",
]
