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

"""The image studio workflow: upload, ideate, generate, refine, animate.

Remote operations are generators in the Mesop event handler style. They
yield once the busy flag is raised and once more after it is released, so
a page handler can `yield from` them to keep the loading overlay current.
"""

import base64
import time
import uuid
from typing import Callable, Iterable, List, Optional

from pydantic import ValidationError

from common.analytics import get_logger, log_workflow_event
from common.error_handling import (
    BusyError,
    InvalidRequestError,
    ServiceError,
    StudioError,
    TransportError,
)
from common.resource_handles import ResourceHandleManager, blob_store
from config.studio_options import (
    ANIMATION_STYLES,
    DEFAULT_ASPECT_RATIO,
    DEFAULT_OUTPUT_TYPE,
    MAX_VIDEO_DURATION,
    MIN_VIDEO_DURATION,
    get_aspect_ratio,
    get_output_type,
    output_type_label,
)
from models.gemini import GenerationService
from models.requests import (
    APIReferenceImage,
    ImageGenerationRequest,
    ImageUpload,
    VideoGenerationRequest,
)
from services.video_service import VideoOperationPoller
from workflows.image_studio.history import ArtifactHistory
from workflows.image_studio.studio_state import (
    GeneratedArtifact,
    StudioImage,
    VideoArtifact,
    VideoJobStatus,
    WorkflowState,
    WorkflowStep,
)

logger = get_logger(__name__)

RETRY_HINT = "Please try again."


def new_artifact_id() -> str:
    return f"gen-{int(time.time() * 1000)}-{uuid.uuid4().hex[:6]}"


def fallback_prompt(output_type: str) -> str:
    """The prompt recorded for a generation made without a creative concept."""
    return f"Generated {output_type_label(output_type)} from reference image(s)."


def refinement_prompt(original_prompt: str, instruction: str) -> str:
    return f'Refined from original prompt "{original_prompt}" with: {instruction}'


class StudioWorkflow:
    """Owns one session's WorkflowState and every transition on it."""

    def __init__(
        self,
        state: WorkflowState,
        service: GenerationService,
        handles: ResourceHandleManager = blob_store,
        sleep: Callable[[float], None] = time.sleep,
        poll_interval: Optional[float] = None,
    ):
        self.state = state
        self.service = service
        self.handles = handles
        self.sleep = sleep
        self.poll_interval = poll_interval
        self.history = ArtifactHistory(state)
        self.handles.touch(state.slot_namespace)

    # Slots

    def _slot(self, kind: str, image_id: str = "") -> str:
        name = f"{self.state.slot_namespace}:{kind}"
        return f"{name}:{image_id}" if image_id else name

    @property
    def video_slot(self) -> str:
        return self._slot("video")

    # Busy flag

    def _acquire(self, message: str) -> int:
        if self.state.busy:
            raise BusyError(
                f"Another operation is in progress ({self.state.busy_message or 'working'})."
            )
        self.state.busy = True
        self.state.busy_message = message
        self.state.notification = ""
        return self.state.session_token

    def _release(self) -> None:
        self.state.busy = False
        self.state.busy_message = ""

    def _is_stale(self, token: int) -> bool:
        return self.state.session_token != token

    def _surface_failure(self, message: str, error: Exception, token: int) -> None:
        logger.error(f"{message} ({type(error).__name__}: {error})")
        if not self._is_stale(token):
            self.state.notification = f"{message} {RETRY_HINT}"

    def _remote(
        self,
        busy_message: str,
        failure_message: str,
        call: Callable[[], object],
        apply: Callable[[object], None],
        before_dispatch: Optional[Callable[[], None]] = None,
    ):
        token = self._acquire(busy_message)
        try:
            if before_dispatch:
                before_dispatch()
            yield
            result = call()
            if self._is_stale(token):
                logger.info(f"Discarding result of '{busy_message}' from a reset session")
            else:
                apply(result)
        except (ServiceError, TransportError) as e:
            self._surface_failure(failure_message, e, token)
        except Exception as e:
            logger.exception(f"Unexpected error during '{busy_message}'")
            self._surface_failure(failure_message, e, token)
        finally:
            self._release()
        yield

    # Steps

    def _set_step(self, step: WorkflowStep) -> None:
        if self.state.step != step:
            log_workflow_event("step_change", {"from": int(self.state.step), "to": int(step)})
        self.state.step = step

    # Uploads

    def _preview(self, kind: str, image_id: str, data: bytes, mime_type: str) -> str:
        handle = self.handles.allocate(data, mime_type)
        return self.handles.replace(self._slot(kind, image_id), handle)

    @staticmethod
    def _upsert(images: List[StudioImage], image: StudioImage) -> None:
        for index, existing in enumerate(images):
            if existing.id == image.id:
                images[index] = image
                return
        images.append(image)

    def add_uploads(self, files: Iterable[ImageUpload]) -> List[StudioImage]:
        """Adds image files to both the uploaded and the processed collections.

        Files that are not images are skipped. A file whose id is already
        present replaces that entry in place.
        """
        added = []
        for upload in files:
            if not upload.is_image:
                logger.info(f"Skipping non-image upload {upload.name} ({upload.mime_type})")
                continue
            data_base64 = base64.b64encode(upload.data).decode("utf-8")
            for kind, images in (("upload", self.state.uploaded), ("processed", self.state.processed)):
                image = StudioImage(
                    id=upload.id,
                    name=upload.name,
                    mime_type=upload.mime_type,
                    data_base64=data_base64,
                    preview_handle=self._preview(kind, upload.id, upload.data, upload.mime_type),
                )
                self._upsert(images, image)
            added.append(self.get_uploaded(upload.id))

        if added and self.state.step == WorkflowStep.UPLOAD:
            self._set_step(WorkflowStep.CONFIGURE)
        return added

    def get_uploaded(self, image_id: str) -> Optional[StudioImage]:
        return next((i for i in self.state.uploaded if i.id == image_id), None)

    def get_processed(self, image_id: str) -> Optional[StudioImage]:
        return next((i for i in self.state.processed if i.id == image_id), None)

    def remove_upload(self, image_id: str) -> bool:
        """Removes an uploaded image. Its processed copy stays."""
        before = len(self.state.uploaded)
        self.state.uploaded = [i for i in self.state.uploaded if i.id != image_id]
        self.handles.replace(self._slot("upload", image_id), None)
        return len(self.state.uploaded) < before

    def remove_processed(self, image_id: str) -> bool:
        """Removes a processed image. Its uploaded original stays."""
        before = len(self.state.processed)
        self.state.processed = [i for i in self.state.processed if i.id != image_id]
        self.handles.replace(self._slot("processed", image_id), None)
        return len(self.state.processed) < before

    # Configuration

    def set_aspect_ratio(self, key: str) -> None:
        if get_aspect_ratio(key) is None:
            raise InvalidRequestError(f"Unknown aspect ratio: {key}")
        self.state.aspect_ratio = key

    def set_output_type(self, key: str) -> None:
        if get_output_type(key) is None:
            raise InvalidRequestError(f"Unknown output type: {key}")
        self.state.output_type = key

    def set_video_duration(self, seconds: int) -> None:
        if not MIN_VIDEO_DURATION <= int(seconds) <= MAX_VIDEO_DURATION:
            raise InvalidRequestError(
                f"Video duration must be between {MIN_VIDEO_DURATION} and {MAX_VIDEO_DURATION} seconds."
            )
        self.state.video_duration = int(seconds)

    def set_animation_style(self, style: str) -> None:
        if style not in ANIMATION_STYLES:
            raise InvalidRequestError(f"Unknown animation style: {style}")
        self.state.animation_style = style

    def set_topic(self, text: str) -> None:
        self.state.topic = text

    def set_creative_concept(self, text: str) -> None:
        self.state.creative_concept = text

    def set_refinement_prompt(self, text: str) -> None:
        self.state.refinement_prompt = text

    # Selection and gallery

    def select_artifact(self, artifact_id: str) -> bool:
        return self.history.select(artifact_id)

    def save_to_gallery(self, artifact_id: Optional[str] = None) -> Optional[GeneratedArtifact]:
        entry = self.history.promote_to_gallery(artifact_id or self.state.selected_artifact_id)
        if entry is not None:
            self.state.notification = "Image saved to gallery!"
        return entry

    # Overlays

    def toggle_suggestions(self) -> None:
        self.state.suggestions_open = not self.state.suggestions_open

    def choose_suggestion(self, suggestion: str) -> None:
        self.state.refinement_prompt = suggestion
        self.state.suggestions_open = False

    def open_start_over_confirm(self) -> None:
        self.state.start_over_confirm_open = True

    def cancel_start_over(self) -> None:
        self.state.start_over_confirm_open = False

    def confirm_start_over(self) -> None:
        self.reset()

    def set_gallery_open(self, is_open: bool) -> None:
        self.state.gallery_open = is_open

    def dismiss_notification(self) -> None:
        self.state.notification = ""

    # Video slot

    def _clear_video(self) -> None:
        self.handles.replace(self.video_slot, None)
        self.state.video = VideoArtifact()
        self.state.video_status = VideoJobStatus.IDLE.value

    # Remote operations

    def request_background_removal(self, processed_id: str):
        image = self.get_processed(processed_id)
        if image is None:
            raise InvalidRequestError(f"No processed image with id {processed_id}.")

        def apply(image_base64):
            target = self.get_processed(processed_id)
            if target is None:
                logger.info(f"Processed image {processed_id} was removed during background removal")
                return
            data = base64.b64decode(image_base64)
            target.preview_handle = self._preview("processed", processed_id, data, "image/png")
            target.data_base64 = image_base64
            target.mime_type = "image/png"

        yield from self._remote(
            "Removing background...",
            "Sorry, we couldn't remove the background.",
            lambda: self.service.remove_background(image),
            apply,
        )

    def request_concept(self, topic: Optional[str] = None):
        if topic is not None:
            self.state.topic = topic
        images = list(self.state.processed)
        output_type = self.state.output_type
        topic_text = self.state.topic.strip() or None

        def apply(text):
            self.state.creative_concept = text

        yield from self._remote(
            "Generating creative concepts...",
            "Sorry, we couldn't generate ideas.",
            lambda: self.service.generate_concept(images, output_type, topic_text),
            apply,
        )

    def _append_generated(self, prompt: str):
        def apply(image_base64):
            self.history.append_and_select(
                GeneratedArtifact(id=new_artifact_id(), image_base64=image_base64, prompt=prompt)
            )

        return apply

    def _image_request(self, prompt: str) -> ImageGenerationRequest:
        """Validates the current settings into a generation request."""
        try:
            return ImageGenerationRequest(
                prompt=prompt,
                output_type=self.state.output_type,
                aspect_ratio=self.state.aspect_ratio,
                reference_images=[
                    APIReferenceImage(data_base64=image.data_base64, mime_type=image.mime_type)
                    for image in self.state.processed
                ],
            )
        except ValidationError as e:
            raise InvalidRequestError(f"Invalid generation settings: {e}") from e

    def _generate(self, request: ImageGenerationRequest) -> str:
        return self.service.generate_image(
            request.prompt,
            request.output_type,
            request.reference_images,
            get_aspect_ratio(request.aspect_ratio).value,
        )

    def request_generation(self):
        concept = self.state.creative_concept.strip()
        if not self.state.processed and not concept:
            raise InvalidRequestError("Please upload an image or write a creative concept first.")
        request = self._image_request(concept)

        def before_dispatch():
            self._clear_video()
            self._set_step(WorkflowStep.REVIEW)

        yield from self._remote(
            "Creating your masterpiece...",
            "Sorry, we couldn't generate the image.",
            lambda: self._generate(request),
            self._append_generated(concept or fallback_prompt(request.output_type)),
            before_dispatch,
        )

    def request_variation(self):
        source = self.history.selected()
        if source is None:
            raise InvalidRequestError("Select an image to create a variation of.")
        request = self._image_request(source.prompt)

        yield from self._remote(
            "Crafting a new variation...",
            "Sorry, we couldn't generate a variation.",
            lambda: self._generate(request),
            self._append_generated(source.prompt),
            self._clear_video,
        )

    def request_refinement(self, instruction: Optional[str] = None):
        source = self.history.selected()
        if source is None:
            raise InvalidRequestError("Select an image to refine.")
        instruction = (self.state.refinement_prompt if instruction is None else instruction).strip()
        if not instruction:
            raise InvalidRequestError("Describe the refinement to apply.")

        append = self._append_generated(refinement_prompt(source.prompt, instruction))

        def apply(image_base64):
            append(image_base64)
            self.state.refinement_prompt = ""

        yield from self._remote(
            "Refining your image...",
            "Sorry, we couldn't refine the image.",
            lambda: self.service.refine_image(source.image_base64, instruction),
            apply,
            self._clear_video,
        )

    def request_video(self):
        """Animates the selected image. Holds the busy flag for the whole job."""
        source = self.history.selected()
        if source is None:
            raise InvalidRequestError("Select an image to animate.")
        try:
            request = VideoGenerationRequest(
                prompt=source.prompt,
                image_base64=source.image_base64,
                duration_seconds=self.state.video_duration,
                animation_style=self.state.animation_style,
                artifact_id=source.id,
            )
        except ValidationError as e:
            raise InvalidRequestError(f"Invalid video settings: {e}") from e

        token = self._acquire("Generating video... This can take a few minutes.")

        def record(status: VideoJobStatus):
            if not self._is_stale(token):
                self.state.video_status = status.value

        poller = VideoOperationPoller(
            self.service,
            self.handles,
            sleep=self.sleep,
            poll_interval=self.poll_interval,
            on_transition=record,
            video_slot=self.video_slot,
        )
        try:
            yield
            video = yield from poller.run(request, is_stale=lambda: self._is_stale(token))
            if video is not None:
                self.state.video = video
        except Exception as e:
            reason = e.message if isinstance(e, StudioError) else str(e)
            self._surface_failure(
                f"Sorry, we couldn't generate the video. Reason: {reason}", e, token
            )
        finally:
            self._release()
        yield
        return poller

    # Reset

    def reset(self) -> None:
        """Returns the session to its initial state. The gallery is kept.

        A busy flag held by an in-flight operation stays with that
        operation, which releases it and discards its stale result.
        """
        state = self.state
        self.handles.clear_slots(self._slot("upload") + ":")
        self.handles.clear_slots(self._slot("processed") + ":")
        self._clear_video()

        state.uploaded = []
        state.processed = []
        self.history.clear()
        state.topic = ""
        state.creative_concept = ""
        state.refinement_prompt = ""
        state.aspect_ratio = DEFAULT_ASPECT_RATIO
        state.output_type = DEFAULT_OUTPUT_TYPE
        state.suggestions_open = False
        state.start_over_confirm_open = False
        state.notification = ""
        state.session_token += 1
        self._set_step(WorkflowStep.UPLOAD)
        log_workflow_event("reset", {"session_token": state.session_token})
