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

"""Protocols, types and parameters for constrained planning."""

from tsrplan.spec.config import CRRTPlannerParameters
from tsrplan.spec.enums import IKStatus, PlanningStatus
from tsrplan.spec.protocols import (
    Differentiable,
    DistanceMetric,
    Interpolator,
    InverseKinematicsSpec,
    PlannerSpec,
    Projectable,
    RobotModel,
    SampleGenerator,
    Sampleable,
    Testable,
)
from tsrplan.spec.types import (
    Bounds,
    IKResult,
    Isometry,
    Jacobian,
    PlanningResult,
    State,
)

__all__ = [
    "Bounds",
    "CRRTPlannerParameters",
    "Differentiable",
    "DistanceMetric",
    "IKResult",
    "IKStatus",
    "Interpolator",
    "InverseKinematicsSpec",
    "Isometry",
    "Jacobian",
    "PlannerSpec",
    "PlanningResult",
    "PlanningStatus",
    "Projectable",
    "RobotModel",
    "SampleGenerator",
    "Sampleable",
    "State",
    "Testable",
]
