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

from dataclasses import dataclass
from typing import Dict, List, Optional


@dataclass(frozen=True)
class AspectRatioOption:
    """A selectable output aspect ratio."""

    key: str
    label: str
    value: str


@dataclass(frozen=True)
class OutputTypeOption:
    """A design category the generated image is styled after."""

    key: str
    label: str


@dataclass(frozen=True)
class WorkflowStepInfo:
    """Title and description of a wizard step, keyed by step number."""

    id: int
    title: str
    description: str


ASPECT_RATIOS: Dict[str, AspectRatioOption] = {
    option.key: option
    for option in [
        AspectRatioOption(key="1:1", label="Square (1:1)", value="1:1"),
        AspectRatioOption(key="16:9", label="Landscape (16:9)", value="16:9"),
        AspectRatioOption(key="9:16", label="Portrait (9:16)", value="9:16"),
        AspectRatioOption(key="4:3", label="Standard (4:3)", value="4:3"),
        AspectRatioOption(key="3:4", label="Tall (3:4)", value="3:4"),
    ]
}

OUTPUT_TYPES: Dict[str, OutputTypeOption] = {
    option.key: option
    for option in [
        OutputTypeOption(key="cinematic-poster", label="Cinematic Poster"),
        OutputTypeOption(key="wedding-card", label="Wedding Card"),
        OutputTypeOption(key="birthday-card", label="Birthday Card"),
        OutputTypeOption(key="flier", label="Flier"),
        OutputTypeOption(key="pinterest-pin", label="Pinterest Pin"),
        OutputTypeOption(key="facebook-post", label="Facebook Post"),
        OutputTypeOption(key="banner", label="Banner"),
    ]
}

ANIMATION_STYLES: List[str] = [
    "subtle parallax",
    "gentle motion",
    "cinematic zoom in",
    "cinematic zoom out",
    "dolly left",
    "dolly right",
    "pan up",
    "pan down",
]

WORKFLOW_STEPS: List[WorkflowStepInfo] = [
    WorkflowStepInfo(1, "Upload Your Image", "Start by uploading one or more images."),
    WorkflowStepInfo(2, "Configure & Ideate", "Set your design parameters and get creative ideas."),
    WorkflowStepInfo(3, "Generate & Refine", "Bring your vision to life and make adjustments."),
]

REFINEMENT_SUGGESTIONS: List[str] = [
    "Change the background to a futuristic cityscape at night.",
    "Add dramatic cinematic lighting from the left.",
    "Make the color palette warmer and more vibrant.",
    "Render the image in a detailed anime style.",
    "Add a subtle motion blur to create a sense of action.",
    "Change the subject's clothing to a steampunk aesthetic.",
    "Incorporate elements of watercolor painting.",
    "Add a text overlay that says 'DREAM BIG'.",
]

DEFAULT_ASPECT_RATIO = "1:1"
DEFAULT_OUTPUT_TYPE = "cinematic-poster"
DEFAULT_ANIMATION_STYLE = "subtle parallax"

MIN_VIDEO_DURATION = 2
MAX_VIDEO_DURATION = 10
DEFAULT_VIDEO_DURATION = 4


def get_aspect_ratio(key: str) -> Optional[AspectRatioOption]:
    """Finds an aspect ratio option by its key."""
    return ASPECT_RATIOS.get(key)


def get_output_type(key: str) -> Optional[OutputTypeOption]:
    """Finds an output type option by its key."""
    return OUTPUT_TYPES.get(key)


def output_type_label(key: str) -> str:
    option = get_output_type(key)
    return option.label if option else key
