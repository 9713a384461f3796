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
Planning Utilities

Standalone helpers shared by constraints and planners.

## Modules

- kinematics_utils: Jacobian operations, singularity detection, pose error computation
- path_utils: Segment discretization, path validity, simplification, length computation
- transform_utils: Isometries and the XYZ Euler convention used by TSRs
- testing: PlanarArm, a small RobotModel for tests and examples
"""

from tsrplan.utils.kinematics_utils import (
    check_singularity,
    compute_error_twist,
    compute_pose_error,
    damped_pseudoinverse,
    get_manipulability,
)
from tsrplan.utils.path_utils import (
    compute_path_length,
    discretize_segment,
    is_segment_valid,
    simplify_path,
)

__all__ = [
    "check_singularity",
    "compute_error_twist",
    "compute_path_length",
    "compute_pose_error",
    "damped_pseudoinverse",
    "discretize_segment",
    "get_manipulability",
    "is_segment_valid",
    "simplify_path",
]
