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

"""Factory functions for planning components."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from tsrplan.planners import CRRTConnectPlanner, SnapPlanner
    from tsrplan.spec import InverseKinematicsSpec, PlannerSpec


def _with_statespace_defaults(kwargs: dict[str, Any]) -> dict[str, Any]:
    from tsrplan.statespace import EuclideanDistanceMetric, LinearInterpolator

    kwargs.setdefault("interpolator", LinearInterpolator())
    kwargs.setdefault("metric", EuclideanDistanceMetric())
    return kwargs


def create_kinematics(
    name: str = "jacobian",
    **kwargs: Any,
) -> InverseKinematicsSpec:
    """Create IK solver. name='jacobian'."""
    if name == "jacobian":
        from tsrplan.kinematics.jacobian_ik import JacobianIK

        return JacobianIK(**kwargs)
    else:
        raise ValueError(f"Unknown kinematics solver: {name}. Available: ['jacobian']")


def create_planner(
    name: str = "rrt_connect",
    **kwargs: Any,
) -> PlannerSpec | SnapPlanner | CRRTConnectPlanner:
    """Create motion planner. name='snap'|'crrt_connect'|'rrt_connect'.

    The interpolator and metric default to linear interpolation and the
    Euclidean distance; 'crrt_connect' also needs a bounds_testable.
    """
    if name == "rrt_connect":
        from tsrplan.planners.rrt_planner import RRTConnectPlanner

        return RRTConnectPlanner(**_with_statespace_defaults(kwargs))
    elif name == "snap":
        from tsrplan.planners.snap_planner import SnapPlanner

        return SnapPlanner(**_with_statespace_defaults(kwargs))
    elif name == "crrt_connect":
        from tsrplan.planners.crrt_connect import CRRTConnectPlanner

        if "bounds_testable" not in kwargs:
            raise TypeError("create_planner('crrt_connect') requires bounds_testable")
        return CRRTConnectPlanner(**_with_statespace_defaults(kwargs))
    else:
        raise ValueError(
            f"Unknown planner: {name}. Available: ['snap', 'crrt_connect', 'rrt_connect']"
        )
