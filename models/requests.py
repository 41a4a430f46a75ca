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

from typing import List, Optional

from pydantic import BaseModel, Field, field_validator

from config.studio_options import (
    ANIMATION_STYLES,
    ASPECT_RATIOS,
    MAX_VIDEO_DURATION,
    MIN_VIDEO_DURATION,
    OUTPUT_TYPES,
)


class ImageUpload(BaseModel):
    """A file handed to the studio by the uploader."""

    name: str
    mime_type: str
    data: bytes
    last_modified: int = Field(..., ge=0)  # epoch milliseconds

    @property
    def id(self) -> str:
        return f"{self.name}-{self.last_modified}"

    @property
    def is_image(self) -> bool:
        return self.mime_type.startswith("image/")


class APIReferenceImage(BaseModel):
    """Represents a single inline reference image for the API request."""

    data_base64: str
    mime_type: str


class ImageGenerationRequest(BaseModel):
    """
    Defines the contract for an image generation request.
    An empty prompt asks the service to derive one from the output type.
    """

    prompt: str = ""
    output_type: str
    aspect_ratio: str
    reference_images: List[APIReferenceImage] = Field(default_factory=list)

    @field_validator("output_type")
    @classmethod
    def _known_output_type(cls, value: str) -> str:
        if value not in OUTPUT_TYPES:
            raise ValueError(f"Unknown output type: {value}")
        return value

    @field_validator("aspect_ratio")
    @classmethod
    def _known_aspect_ratio(cls, value: str) -> str:
        if value not in ASPECT_RATIOS:
            raise ValueError(f"Unknown aspect ratio: {value}")
        return value


class VideoGenerationRequest(BaseModel):
    """Defines the contract for animating a generated image."""

    prompt: str
    image_base64: str = Field(..., min_length=1)
    duration_seconds: int = Field(..., ge=MIN_VIDEO_DURATION, le=MAX_VIDEO_DURATION)
    animation_style: str
    artifact_id: Optional[str] = None

    @field_validator("animation_style")
    @classmethod
    def _known_style(cls, value: str) -> str:
        if value not in ANIMATION_STYLES:
            raise ValueError(f"Unknown animation style: {value}")
        return value
