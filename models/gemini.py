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

"""Gemini and Veo backed generation service for the image studio."""

import base64
import functools
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Any, List, Optional, Protocol, Sequence

import httpx
import requests
from google import genai
from google.cloud import storage
from google.genai import errors, types

from common.analytics import get_logger, track_model_call
from common.error_handling import ServiceError, TransportError
from config.default import Default
from config.studio_options import output_type_label
from models.requests import APIReferenceImage
from workflows.image_studio.image_studio_config import ImageStudioConfig
from workflows.image_studio.studio_state import StudioImage

logger = get_logger(__name__)

_NETWORK_ERRORS = (
    httpx.TransportError,
    requests.RequestException,
    ConnectionError,
    TimeoutError,
)


@dataclass
class VideoOperationStatus:
    """Snapshot of a long running video generation operation."""

    name: str = ""
    done: bool = False
    error_message: Optional[str] = None
    video_uri: Optional[str] = None
    # The SDK operation object, needed for the next poll.
    raw: Any = None


class GenerationService(Protocol):
    """The operations the studio workflow consumes from the backend."""

    def remove_background(self, image: StudioImage) -> str: ...

    def generate_concept(
        self, images: Sequence[StudioImage], output_type: str, topic: Optional[str] = None
    ) -> str: ...

    def generate_image(
        self,
        prompt: str,
        output_type: str,
        reference_images: Sequence[APIReferenceImage],
        aspect_ratio: str,
    ) -> str: ...

    def refine_image(self, base_image_base64: str, instruction: str) -> str: ...

    def start_video(
        self, prompt: str, image_base64: str, duration_seconds: int, animation_style: str
    ) -> VideoOperationStatus: ...

    def poll_video(self, operation: VideoOperationStatus) -> VideoOperationStatus: ...

    def fetch_video(self, uri: str) -> bytes: ...


def _image_part(data_base64: str, mime_type: str) -> types.Part:
    return types.Part.from_bytes(data=base64.b64decode(data_base64), mime_type=mime_type)


def _extract_image_base64(response) -> Optional[str]:
    """Returns the first inline image of a response as base64, if any."""
    if not response.candidates:
        return None
    content = response.candidates[0].content
    if not content or not content.parts:
        return None
    for part in content.parts:
        if part.inline_data and part.inline_data.data:
            return base64.b64encode(part.inline_data.data).decode("utf-8")
    return None


@contextmanager
def _backend_call(model_name: str, action: str, **details):
    """Logs the call and maps SDK and network failures onto studio errors."""
    try:
        with track_model_call(model_name=model_name, action=action, **details):
            yield
    except (ServiceError, TransportError):
        raise
    except _NETWORK_ERRORS as e:
        logger.error(f"{action} could not reach the backend: {e}")
        raise TransportError(f"{action} failed: could not reach the service.") from e
    except errors.APIError as e:
        logger.error(f"{action} failed with API error {e.code}: {e.message}")
        raise ServiceError(f"{action} failed: {e.message}") from e
    except Exception as e:
        # Credential lookups and SDK argument checks raise outside APIError.
        logger.error(f"{action} failed unexpectedly ({type(e).__name__}): {e}")
        raise ServiceError(f"{action} failed: {e}") from e


class GeminiStudioService:
    """GenerationService backed by the google-genai SDK."""

    def __init__(self, client: Optional[genai.Client] = None, config: Optional[Default] = None):
        self.config = config or Default()
        self._client = client
        self.prompts = ImageStudioConfig()

    @property
    def client(self) -> genai.Client:
        if self._client is None:
            if self.config.USE_VERTEXAI:
                self._client = genai.Client(
                    vertexai=True,
                    project=self.config.PROJECT_ID,
                    location=self.config.LOCATION,
                )
            else:
                self._client = genai.Client(api_key=self.config.GEMINI_API_KEY)
        return self._client

    def _generate_image_content(self, action: str, parts: List[Any], **details) -> str:
        with _backend_call(self.config.IMAGE_MODEL, action, **details):
            response = self.client.models.generate_content(
                model=self.config.IMAGE_MODEL,
                contents=parts,
                config=types.GenerateContentConfig(
                    response_modalities=["IMAGE", "TEXT"],
                ),
            )
        image_base64 = _extract_image_base64(response)
        if not image_base64:
            raise ServiceError(f"{action} failed: the model returned no image.")
        return image_base64

    def remove_background(self, image: StudioImage) -> str:
        parts = [
            _image_part(image.data_base64, image.mime_type),
            self.prompts.get_prompt("remove_background"),
        ]
        try:
            return self._generate_image_content("Background removal", parts)
        except ServiceError as e:
            raise ServiceError("Failed to remove background.") from e

    def generate_concept(
        self, images: Sequence[StudioImage], output_type: str, topic: Optional[str] = None
    ) -> str:
        base = self.prompts.render("concept_base", output_type=output_type_label(output_type))
        if images:
            prompt = self.prompts.render("concept_with_images", base=base)
        elif topic:
            prompt = self.prompts.render("concept_with_topic", base=base, topic=topic)
        else:
            # Nothing to work from, so skip the paid call.
            return self.prompts.get_prompt("concept_missing_input")

        parts = [_image_part(img.data_base64, img.mime_type) for img in images]
        parts.append(prompt)
        with _backend_call(
            self.config.CONCEPT_MODEL, "Concept generation", num_images=len(images)
        ):
            response = self.client.models.generate_content(
                model=self.config.CONCEPT_MODEL,
                contents=parts,
            )
        if not response.text:
            raise ServiceError("Concept generation failed: the model returned no text.")
        return response.text

    def build_generation_prompt(
        self, prompt: str, output_type: str, has_references: bool, aspect_ratio: str
    ) -> str:
        """Returns the full generation prompt, synthesizing one when `prompt` is empty."""
        if prompt:
            return self.prompts.render(
                "generate_from_concept", concept=prompt, aspect_ratio=aspect_ratio
            )
        key = "generate_from_references" if has_references else "generate_from_output_type"
        return self.prompts.render(
            key, output_type=output_type_label(output_type), aspect_ratio=aspect_ratio
        )

    def generate_image(
        self,
        prompt: str,
        output_type: str,
        reference_images: Sequence[APIReferenceImage],
        aspect_ratio: str,
    ) -> str:
        generation_prompt = self.build_generation_prompt(
            prompt, output_type, bool(reference_images), aspect_ratio
        )
        parts = [_image_part(img.data_base64, img.mime_type) for img in reference_images]
        parts.append(generation_prompt)
        return self._generate_image_content(
            "Image generation",
            parts,
            prompt_length=len(generation_prompt),
            aspect_ratio=aspect_ratio,
            num_reference_images=len(reference_images),
        )

    def refine_image(self, base_image_base64: str, instruction: str) -> str:
        parts = [
            _image_part(base_image_base64, "image/png"),
            self.prompts.render("refine", instruction=instruction),
        ]
        return self._generate_image_content("Image refinement", parts)

    def start_video(
        self, prompt: str, image_base64: str, duration_seconds: int, animation_style: str
    ) -> VideoOperationStatus:
        video_prompt = self.prompts.render(
            "video", duration=duration_seconds, animation_style=animation_style, prompt=prompt
        )
        with _backend_call(
            self.config.VIDEO_MODEL,
            "Video generation",
            duration_seconds=duration_seconds,
            animation_style=animation_style,
        ):
            operation = self.client.models.generate_videos(
                model=self.config.VIDEO_MODEL,
                prompt=video_prompt,
                image=types.Image(
                    image_bytes=base64.b64decode(image_base64),
                    mime_type="image/png",
                ),
                config=types.GenerateVideosConfig(number_of_videos=1),
            )
        logger.info(f"Started video operation {operation.name}")
        return self._to_status(operation)

    def poll_video(self, operation: VideoOperationStatus) -> VideoOperationStatus:
        try:
            refreshed = self.client.operations.get(operation.raw)
        except Exception as e:
            logger.error(f"Polling video operation {operation.name} failed: {e}")
            raise TransportError("Polling for video generation status failed.") from e
        return self._to_status(refreshed)

    def _to_status(self, operation) -> VideoOperationStatus:
        status = VideoOperationStatus(
            name=operation.name or "",
            done=bool(operation.done),
            raw=operation,
        )
        if operation.error:
            error = operation.error
            message = error.get("message") if isinstance(error, dict) else str(error)
            status.error_message = message or "Unknown error during video generation."
        elif operation.done and operation.response and operation.response.generated_videos:
            video = operation.response.generated_videos[0].video
            status.video_uri = video.uri if video else None
        return status

    def fetch_video(self, uri: str) -> bytes:
        """Downloads the finished video. Generated URIs are short lived."""
        if uri.startswith("gs://"):
            bucket_name, _, blob_name = uri[len("gs://"):].partition("/")
            try:
                blob = storage.Client(project=self.config.PROJECT_ID).bucket(bucket_name).blob(blob_name)
                return blob.download_as_bytes()
            except Exception as e:
                raise TransportError(f"Failed to fetch video: {e}") from e

        params = {"key": self.config.GEMINI_API_KEY} if self.config.GEMINI_API_KEY else None
        try:
            response = requests.get(
                uri, params=params, timeout=self.config.VIDEO_FETCH_TIMEOUT_SECONDS
            )
            response.raise_for_status()
        except requests.RequestException as e:
            raise TransportError(f"Failed to fetch video: {e}") from e
        return response.content


@functools.lru_cache(maxsize=1)
def get_generation_service() -> GeminiStudioService:
    """Process-wide service, created on first use."""
    return GeminiStudioService()
