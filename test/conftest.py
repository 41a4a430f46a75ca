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
import base64
import os
import sys

import pytest

# Add the project root to the Python path
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from common.resource_handles import ResourceHandleManager
from models.gemini import VideoOperationStatus
from models.requests import ImageUpload
from workflows.image_studio.backend import StudioWorkflow
from workflows.image_studio.studio_state import WorkflowState


def b64(data: bytes) -> str:
    return base64.b64encode(data).decode("utf-8")


def make_upload(name="cat.png", mime_type="image/png", data=b"cat-bytes", last_modified=1700000000000):
    return ImageUpload(name=name, mime_type=mime_type, data=data, last_modified=last_modified)


def drain(generator):
    """Runs a workflow generator to completion and returns its return value."""
    try:
        while True:
            next(generator)
    except StopIteration as stop:
        return stop.value


class SleepRecorder:
    """Stands in for time.sleep and records the requested delays."""

    def __init__(self):
        self.calls = []

    def __call__(self, seconds):
        self.calls.append(seconds)


class FakeGenerationService:
    """Scriptable GenerationService that records every call it receives."""

    def __init__(self):
        self.calls = []
        self.image_payloads = []
        self.poll_script = []
        self.failures = {}
        self.during_call = None
        self.video_bytes = b"mp4-bytes"

    def _record(self, name, *args):
        self.calls.append((name, args))
        if self.during_call:
            self.during_call(name)
        if name in self.failures:
            raise self.failures[name]

    def _next_image(self, default: bytes) -> str:
        if self.image_payloads:
            return b64(self.image_payloads.pop(0))
        return b64(default)

    def calls_to(self, name):
        return [args for call, args in self.calls if call == name]

    def remove_background(self, image):
        self._record("remove_background", image.id)
        return self._next_image(b"no-background-" + image.id.encode())

    def generate_concept(self, images, output_type, topic=None):
        self._record("generate_concept", len(images), output_type, topic)
        return f"A bold {output_type} concept"

    def generate_image(self, prompt, output_type, reference_images, aspect_ratio):
        self._record("generate_image", prompt, output_type, len(reference_images), aspect_ratio)
        return self._next_image(b"generated")

    def refine_image(self, base_image_base64, instruction):
        self._record("refine_image", base_image_base64, instruction)
        return self._next_image(b"refined")

    def start_video(self, prompt, image_base64, duration_seconds, animation_style):
        self._record("start_video", prompt, duration_seconds, animation_style)
        return VideoOperationStatus(name="operations/video-1", done=False)

    def poll_video(self, operation):
        self._record("poll_video", operation.name)
        if not self.poll_script:
            return VideoOperationStatus(name=operation.name, done=True, video_uri="https://media/video.mp4")
        step = self.poll_script.pop(0)
        if isinstance(step, Exception):
            raise step
        return step

    def fetch_video(self, uri):
        self._record("fetch_video", uri)
        return self.video_bytes


@pytest.fixture
def service():
    return FakeGenerationService()


@pytest.fixture
def handles():
    return ResourceHandleManager()


@pytest.fixture
def sleep():
    return SleepRecorder()


@pytest.fixture
def workflow(service, handles, sleep):
    return StudioWorkflow(WorkflowState(), service, handles=handles, sleep=sleep, poll_interval=10)
