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
Motion Planners Module

All planners are robot-agnostic: feasibility comes from Testable objects,
random targets from Sampleable objects and trajectory constraints from
Projectable objects.

## Implementations

- SnapPlanner: straight-line fast path
- CRRTConnectPlanner: bi-directional RRT-Connect with constraint projection
- RRTConnectPlanner: unconstrained bi-directional RRT-Connect (PlannerSpec)

## Usage

Use factory functions to create planners:

```python
from tsrplan.factory import create_planner

planner = create_planner(name="rrt_connect", interpolator=interp, metric=metric)
result = planner.plan(q_start, q_goal, sampleable, testable)
```
"""

from tsrplan.planners.crrt_connect import CRRTConnectPlanner, plan_crrt_connect
from tsrplan.planners.rrt_planner import RRTConnectPlanner
from tsrplan.planners.snap_planner import SnapPlanner, plan_snap
from tsrplan.planners.tree import NO_PARENT, Tree

__all__ = [
    "NO_PARENT",
    "CRRTConnectPlanner",
    "RRTConnectPlanner",
    "SnapPlanner",
    "Tree",
    "plan_crrt_connect",
    "plan_snap",
]
