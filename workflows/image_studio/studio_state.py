# Copyright 2025 Google LLC
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

import uuid
from dataclasses import dataclass, field
from enum import Enum, IntEnum
from typing import List, Optional

from config.studio_options import (
    DEFAULT_ANIMATION_STYLE,
    DEFAULT_ASPECT_RATIO,
    DEFAULT_OUTPUT_TYPE,
    DEFAULT_VIDEO_DURATION,
)


class WorkflowStep(IntEnum):
    UPLOAD = 1
    CONFIGURE = 2
    REVIEW = 3


class VideoJobStatus(str, Enum):
    IDLE = "idle"
    REQUESTED = "requested"
    POLLING = "polling"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


@dataclass
class StudioImage:
    """An uploaded reference image, or its processed working copy."""

    id: str = ""
    name: str = ""
    mime_type: str = ""
    data_base64: str = ""
    preview_handle: str = ""


@dataclass
class GeneratedArtifact:
    """A generated image. Never mutated after creation."""

    id: str = ""
    image_base64: str = ""
    prompt: str = ""


@dataclass
class VideoArtifact:
    handle: str = ""
    artifact_id: str = ""


@dataclass
class WorkflowState:
    """All session state of the studio workflow.

    Plain dataclasses only, so the whole struct can live in Mesop page state.
    """

    # pylint: disable=E3701:invalid-field-call

    step: int = WorkflowStep.UPLOAD

    uploaded: List[StudioImage] = field(default_factory=list)
    processed: List[StudioImage] = field(default_factory=list)

    # History doubles as the undo trail, oldest first.
    history: List[GeneratedArtifact] = field(default_factory=list)
    selected_artifact_id: Optional[str] = None
    # Most recent save first. Survives reset.
    gallery: List[GeneratedArtifact] = field(default_factory=list)

    # An empty handle means there is no live video.
    video: VideoArtifact = field(default_factory=VideoArtifact)
    video_status: str = VideoJobStatus.IDLE.value

    # Configuration
    aspect_ratio: str = DEFAULT_ASPECT_RATIO
    output_type: str = DEFAULT_OUTPUT_TYPE
    video_duration: int = DEFAULT_VIDEO_DURATION
    animation_style: str = DEFAULT_ANIMATION_STYLE

    # Free text
    topic: str = ""
    creative_concept: str = ""
    refinement_prompt: str = ""

    # Overlays
    suggestions_open: bool = False
    start_over_confirm_open: bool = False
    gallery_open: bool = False

    busy: bool = False
    busy_message: str = ""
    notification: str = ""

    # Incremented by every reset so in-flight results can be recognised as stale.
    session_token: int = 0
    # Prefix for this session's slots in the shared handle manager.
    slot_namespace: str = field(default_factory=lambda: uuid.uuid4().hex)
