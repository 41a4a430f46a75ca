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
from types import SimpleNamespace
from unittest.mock import MagicMock

import httpx
import pytest
import requests

from common.error_handling import ServiceError, TransportError
from config.default import Default
from models.gemini import GeminiStudioService, VideoOperationStatus
from models.requests import APIReferenceImage
from workflows.image_studio.studio_state import StudioImage


def _image_response(data: bytes):
    part = SimpleNamespace(inline_data=SimpleNamespace(data=data, mime_type="image/png"))
    return SimpleNamespace(candidates=[SimpleNamespace(content=SimpleNamespace(parts=[part]))])


def _studio_image(image_id="cat.png-1"):
    return StudioImage(
        id=image_id,
        name="cat.png",
        mime_type="image/png",
        data_base64=base64.b64encode(b"cat").decode("utf-8"),
    )


@pytest.fixture
def client():
    return MagicMock()


@pytest.fixture
def gemini(client):
    config = Default()
    config.GEMINI_API_KEY = "test-key"
    return GeminiStudioService(client=client, config=config)


def _sent_prompt(client) -> str:
    return client.models.generate_content.call_args.kwargs["contents"][-1]


def test_concept_without_images_or_topic_skips_the_call(gemini, client):
    text = gemini.generate_concept([], "banner", topic=None)

    assert text == "Please provide an image or a topic to generate ideas."
    client.models.generate_content.assert_not_called()


def test_concept_from_topic(gemini, client):
    client.models.generate_content.return_value = SimpleNamespace(text="A sunny banner")

    assert gemini.generate_concept([], "banner", topic="Beach party") == "A sunny banner"
    prompt = _sent_prompt(client)
    assert "Banner" in prompt
    assert '"Beach party"' in prompt


def test_concept_from_images_sends_them_first(gemini, client):
    client.models.generate_content.return_value = SimpleNamespace(text="An idea")

    gemini.generate_concept([_studio_image(), _studio_image("dog.png-1")], "flier", topic="ignored")

    contents = client.models.generate_content.call_args.kwargs["contents"]
    assert len(contents) == 3
    assert contents[-1].startswith("Analyze the provided image(s).")
    assert "ignored" not in contents[-1]


def test_generation_prompt_fallbacks(gemini):
    with_references = gemini.build_generation_prompt("", "wedding-card", True, "9:16")
    without_references = gemini.build_generation_prompt("", "wedding-card", False, "9:16")
    from_concept = gemini.build_generation_prompt("Gold foil florals", "wedding-card", True, "9:16")

    assert with_references.startswith("Based on the provided reference image(s)")
    assert "Wedding Card" in with_references and "9:16" in with_references
    assert without_references.startswith("Generate a new")
    assert '"Gold foil florals"' in from_concept


def test_generate_image_returns_base64_payload(gemini, client):
    client.models.generate_content.return_value = _image_response(b"X")

    reference = APIReferenceImage(data_base64=base64.b64encode(b"cat").decode("utf-8"), mime_type="image/png")
    result = gemini.generate_image("", "cinematic-poster", [reference], "1:1")

    assert result == base64.b64encode(b"X").decode("utf-8")
    kwargs = client.models.generate_content.call_args.kwargs
    assert kwargs["model"] == gemini.config.IMAGE_MODEL
    assert len(kwargs["contents"]) == 2


def test_response_without_image_is_a_service_error(gemini, client):
    client.models.generate_content.return_value = SimpleNamespace(candidates=[])

    with pytest.raises(ServiceError):
        gemini.refine_image(base64.b64encode(b"A").decode("utf-8"), "make it darker")


def test_background_removal_failure_message(gemini, client):
    client.models.generate_content.return_value = SimpleNamespace(candidates=[])

    with pytest.raises(ServiceError) as excinfo:
        gemini.remove_background(_studio_image())

    assert excinfo.value.message == "Failed to remove background."


@pytest.mark.parametrize(
    "error",
    [
        httpx.ConnectError("unreachable"),
        requests.ConnectionError("reset"),
        TimeoutError("slow"),
    ],
)
def test_network_errors_map_to_transport_error(gemini, client, error):
    client.models.generate_content.side_effect = error

    with pytest.raises(TransportError):
        gemini.generate_image("Concept", "banner", [], "16:9")


def test_start_video_puts_duration_and_style_in_prompt(gemini, client):
    client.models.generate_videos.return_value = SimpleNamespace(
        name="operations/1", done=False, error=None, response=None
    )

    status = gemini.start_video("P", base64.b64encode(b"A").decode("utf-8"), 6, "pan up")

    assert status.name == "operations/1"
    assert status.done is False
    prompt = client.models.generate_videos.call_args.kwargs["prompt"]
    assert "6-second" in prompt and "pan up" in prompt and '"P"' in prompt


def test_poll_maps_finished_operation(gemini, client):
    video = SimpleNamespace(uri="https://media/v.mp4")
    client.operations.get.return_value = SimpleNamespace(
        name="operations/1",
        done=True,
        error=None,
        response=SimpleNamespace(generated_videos=[SimpleNamespace(video=video)]),
    )

    status = gemini.poll_video(VideoOperationStatus(name="operations/1", raw=object()))

    assert status.done is True
    assert status.video_uri == "https://media/v.mp4"
    assert status.error_message is None


def test_poll_maps_error_payload(gemini, client):
    client.operations.get.return_value = SimpleNamespace(
        name="operations/1", done=True, error={"message": "Blocked by safety filters"}, response=None
    )

    status = gemini.poll_video(VideoOperationStatus(name="operations/1"))

    assert status.error_message == "Blocked by safety filters"


def test_poll_fault_is_a_transport_error(gemini, client):
    client.operations.get.side_effect = RuntimeError("socket closed")

    with pytest.raises(TransportError) as excinfo:
        gemini.poll_video(VideoOperationStatus(name="operations/1"))

    assert excinfo.value.message == "Polling for video generation status failed."


def test_fetch_video_sends_api_key(gemini, monkeypatch):
    response = MagicMock(content=b"mp4")
    get = MagicMock(return_value=response)
    monkeypatch.setattr(requests, "get", get)

    assert gemini.fetch_video("https://media/v.mp4") == b"mp4"
    assert get.call_args.kwargs["params"] == {"key": "test-key"}


def test_fetch_video_failure_is_a_transport_error(gemini, monkeypatch):
    monkeypatch.setattr(requests, "get", MagicMock(side_effect=requests.Timeout("expired")))

    with pytest.raises(TransportError):
        gemini.fetch_video("https://media/v.mp4")


def test_unexpected_sdk_errors_map_to_service_error(gemini, client):
    client.models.generate_content.side_effect = ValueError("Missing key inputs argument")

    with pytest.raises(ServiceError) as excinfo:
        gemini.generate_concept([], "banner", topic="Launch")

    assert "Missing key inputs argument" in excinfo.value.message
