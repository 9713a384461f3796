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
Constraints

Implementations of the capability Protocols in tsrplan.spec:

- Joint limits: JointLimitSampleable, JointLimitTestable, JointLimitProjectable
- Task space: TSR, FrameTestable, FrameDifferentiable, InverseKinematicsSampleable
- Environment: CollisionFree
- Combinators: TestableIntersection, CyclicSampleable, FiniteSampleable,
  NewtonsMethodProjectable
"""

from tsrplan.constraint.bounds import (
    JointLimitProjectable,
    JointLimitSampleable,
    JointLimitTestable,
    create_projectable_bounds,
    create_sampleable_bounds,
    create_testable_bounds,
)
from tsrplan.constraint.collision import CollisionFree
from tsrplan.constraint.frame import FrameDifferentiable, FrameTestable
from tsrplan.constraint.intersection import TestableIntersection
from tsrplan.constraint.inverse_kinematics import InverseKinematicsSampleable
from tsrplan.constraint.newton import NewtonsMethodProjectable
from tsrplan.constraint.sampleable import CyclicSampleable, FiniteSampleable
from tsrplan.constraint.tsr import TSR, TSRSampleGenerator

__all__ = [
    "TSR",
    "CollisionFree",
    "CyclicSampleable",
    "FiniteSampleable",
    "FrameDifferentiable",
    "FrameTestable",
    "InverseKinematicsSampleable",
    "JointLimitProjectable",
    "JointLimitSampleable",
    "JointLimitTestable",
    "NewtonsMethodProjectable",
    "TSRSampleGenerator",
    "TestableIntersection",
    "create_projectable_bounds",
    "create_sampleable_bounds",
    "create_testable_bounds",
]
