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

"""Download links with deterministic file names."""

from urllib.parse import quote

from common.resource_handles import HANDLE_PREFIX


def artifact_filename(artifact_id: str) -> str:
    return f"ai-creation-{artifact_id}.png"


def video_filename(artifact_id: str) -> str:
    return f"ai-video-{artifact_id}.mp4"


def processed_filename(original_name: str) -> str:
    return f"processed-{original_name}"


def download_link(payload_or_handle: str, filename: str, mime_type: str = "image/png") -> str:
    """Builds a link that saves `payload_or_handle` as `filename`.

    Accepts a data URL, a blob handle, or a raw base64 image payload.
    """
    if payload_or_handle.startswith("data:"):
        return payload_or_handle
    if payload_or_handle.startswith(HANDLE_PREFIX):
        return f"{payload_or_handle}?download={quote(filename)}"
    return f"data:{mime_type};base64,{payload_or_handle}"


def download_anchor(payload_or_handle: str, filename: str, label: str = "Download") -> str:
    """HTML anchor for the download link. Rendered by the page with me.html."""
    href = download_link(payload_or_handle, filename)
    return f'<a href="{href}" download="{filename}">{label}</a>'
