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
from common.downloads import (
    artifact_filename,
    download_anchor,
    download_link,
    processed_filename,
    video_filename,
)


def test_filenames():
    assert artifact_filename("gen-1") == "ai-creation-gen-1.png"
    assert video_filename("gen-1") == "ai-video-gen-1.mp4"
    assert processed_filename("cat.png") == "processed-cat.png"


def test_download_link_for_raw_payload():
    assert download_link("aGVsbG8=", "ai-creation-1.png") == "data:image/png;base64,aGVsbG8="


def test_download_link_keeps_data_urls():
    url = "data:image/jpeg;base64,aGVsbG8="
    assert download_link(url, "processed-cat.jpg") == url


def test_download_link_for_handle():
    link = download_link("/blob/abc123", "ai-video-gen 1.mp4")
    assert link == "/blob/abc123?download=ai-video-gen%201.mp4"


def test_download_anchor():
    anchor = download_anchor("/blob/abc123", "ai-video-1.mp4", label="Save")
    assert anchor == '<a href="/blob/abc123?download=ai-video-1.mp4" download="ai-video-1.mp4">Save</a>'
