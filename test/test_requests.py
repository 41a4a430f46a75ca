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
import pytest
from pydantic import ValidationError

from models.requests import ImageGenerationRequest, ImageUpload, VideoGenerationRequest


def test_upload_id_combines_name_and_timestamp():
    upload = ImageUpload(name="cat.png", mime_type="image/png", data=b"x", last_modified=42)
    assert upload.id == "cat.png-42"
    assert upload.is_image


def test_upload_rejects_negative_timestamp():
    with pytest.raises(ValidationError):
        ImageUpload(name="cat.png", mime_type="image/png", data=b"x", last_modified=-1)


def test_image_request_validates_enums():
    request = ImageGenerationRequest(output_type="banner", aspect_ratio="4:3")
    assert request.prompt == ""
    with pytest.raises(ValidationError):
        ImageGenerationRequest(output_type="zine", aspect_ratio="4:3")
    with pytest.raises(ValidationError):
        ImageGenerationRequest(output_type="banner", aspect_ratio="5:4")


@pytest.mark.parametrize("duration", [1, 11])
def test_video_request_bounds_duration(duration):
    with pytest.raises(ValidationError):
        VideoGenerationRequest(
            prompt="P", image_base64="QQ==", duration_seconds=duration, animation_style="pan up"
        )


def test_video_request_requires_known_style():
    with pytest.raises(ValidationError):
        VideoGenerationRequest(prompt="P", image_base64="QQ==", duration_seconds=4, animation_style="spin")
