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

"""Process-wide settings for the planning façade."""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class PlanningSettings(BaseSettings):
    """Façade-level constants, overridable through ``TSRPLAN_*`` env vars.

    Tolerances of the constrained tree planner are not part of these
    settings; they are supplied per call via ``CRRTPlannerParameters``.
    """

    collision_resolution: float = Field(default=0.1, gt=0.0)
    max_snap_samples: int = Field(default=100, ge=0)
    offset_position_tolerance: float = Field(default=1e-3, ge=0.0)
    offset_angular_tolerance: float = Field(default=1e-3, ge=0.0)

    model_config = SettingsConfigDict(
        env_prefix="TSRPLAN_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        frozen=True,
    )
