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
Constrained Motion Planning

Sampling-based motion planning for articulated robots with task-space
constraints expressed as Task Space Regions (TSRs).

## Architecture

- Constraint capabilities (tsrplan.spec): Sampleable, Testable,
  Differentiable, Projectable, implemented and combined in tsrplan.constraint
- Planners (tsrplan.planners): SnapPlanner, CRRTConnectPlanner,
  RRTConnectPlanner
- Façade (tsrplan.robot): plan_to_configuration, plan_to_tsr,
  plan_to_tsr_with_trajectory_constraint, plan_to_end_effector_offset_by_crrt

## Example

```python
from tsrplan import CollisionFree, TSR, plan_to_tsr

result = plan_to_tsr(robot, TSR(T0_w=pose), CollisionFree(robot), rng, 5.0, 5)
if result.is_success():
    waypoints = result.trajectory.get_waypoints()
```
"""

from tsrplan.config import PlanningSettings
from tsrplan.constraint import (
    TSR,
    CollisionFree,
    CyclicSampleable,
    FiniteSampleable,
    FrameDifferentiable,
    FrameTestable,
    InverseKinematicsSampleable,
    NewtonsMethodProjectable,
    TestableIntersection,
)
from tsrplan.factory import create_kinematics, create_planner
from tsrplan.planners import CRRTConnectPlanner, RRTConnectPlanner, SnapPlanner
from tsrplan.robot import (
    plan_to_configuration,
    plan_to_configurations,
    plan_to_end_effector_offset_by_crrt,
    plan_to_tsr,
    plan_to_tsr_with_trajectory_constraint,
)
from tsrplan.spec import CRRTPlannerParameters, PlanningResult, PlanningStatus
from tsrplan.trajectory import InterpolatedTrajectory

__all__ = [
    "TSR",
    "CRRTConnectPlanner",
    "CRRTPlannerParameters",
    "CollisionFree",
    "CyclicSampleable",
    "FiniteSampleable",
    "FrameDifferentiable",
    "FrameTestable",
    "InterpolatedTrajectory",
    "InverseKinematicsSampleable",
    "NewtonsMethodProjectable",
    "PlanningResult",
    "PlanningSettings",
    "PlanningStatus",
    "RRTConnectPlanner",
    "SnapPlanner",
    "TestableIntersection",
    "create_kinematics",
    "create_planner",
    "plan_to_configuration",
    "plan_to_configurations",
    "plan_to_end_effector_offset_by_crrt",
    "plan_to_tsr",
    "plan_to_tsr_with_trajectory_constraint",
]
