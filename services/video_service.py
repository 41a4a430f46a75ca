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

"""Drives a long running video generation job to completion."""

import time
from typing import Callable, Generator, List, Optional

from common.analytics import get_logger
from common.error_handling import InvalidRequestError, ServiceError
from common.resource_handles import ResourceHandleManager
from config.default import Default
from models.gemini import GenerationService, VideoOperationStatus
from models.requests import VideoGenerationRequest
from workflows.image_studio.studio_state import VideoArtifact, VideoJobStatus

logger = get_logger(__name__)

VIDEO_SLOT = "video"


class VideoOperationPoller:
    """Idle -> Requested -> Polling -> {Succeeded, Failed}.

    Polls at a fixed interval until the operation reports done. A failed
    poll is terminal and is not retried. There is no cancellation.
    """

    def __init__(
        self,
        service: GenerationService,
        handles: ResourceHandleManager,
        sleep: Callable[[float], None] = time.sleep,
        poll_interval: Optional[float] = None,
        on_transition: Optional[Callable[[VideoJobStatus], None]] = None,
        video_slot: str = VIDEO_SLOT,
    ):
        self.service = service
        self.handles = handles
        self.video_slot = video_slot
        self.sleep = sleep
        self.poll_interval = (
            poll_interval if poll_interval is not None else Default().VIDEO_POLL_INTERVAL_SECONDS
        )
        self.on_transition = on_transition
        self.status = VideoJobStatus.IDLE
        self.transitions: List[VideoJobStatus] = [VideoJobStatus.IDLE]
        self.poll_count = 0
        self.error_message = ""

    def _transition(self, status: VideoJobStatus) -> VideoJobStatus:
        self.status = status
        self.transitions.append(status)
        if self.on_transition:
            self.on_transition(status)
        return status

    def _fail(self, error: Exception) -> None:
        self.error_message = str(error)
        self._transition(VideoJobStatus.FAILED)
        logger.error(f"Video job failed after {self.poll_count} poll(s): {error}")

    def run(
        self,
        request: VideoGenerationRequest,
        is_stale: Callable[[], bool] = lambda: False,
    ) -> Generator[VideoJobStatus, None, Optional[VideoArtifact]]:
        """Runs the job, yielding after each transition.

        Returns the new VideoArtifact, or None if the result went stale while
        the job was running. Any failure marks the job FAILED and is re-raised.
        """
        if self.status != VideoJobStatus.IDLE:
            raise InvalidRequestError("This video job has already been started.")

        yield self._transition(VideoJobStatus.REQUESTED)
        try:
            operation = self.service.start_video(
                prompt=request.prompt,
                image_base64=request.image_base64,
                duration_seconds=request.duration_seconds,
                animation_style=request.animation_style,
            )
        except Exception as e:
            self._fail(e)
            raise

        yield self._transition(VideoJobStatus.POLLING)
        try:
            operation = yield from self._poll_until_done(operation)
        except Exception as e:
            self._fail(e)
            raise

        yield self._transition(VideoJobStatus.SUCCEEDED)
        logger.info(f"Video operation {operation.name} finished, fetching media")
        try:
            video_bytes = self.service.fetch_video(operation.video_uri)
        except Exception as e:
            self._fail(e)
            raise

        if is_stale():
            logger.info("Discarding video result from a session that was reset")
            return None

        handle = self.handles.allocate(video_bytes, "video/mp4")
        self.handles.replace(self.video_slot, handle)
        return VideoArtifact(handle=handle, artifact_id=request.artifact_id or "")

    def _poll_until_done(
        self, operation: VideoOperationStatus
    ) -> Generator[VideoJobStatus, None, VideoOperationStatus]:
        while not operation.done and not operation.error_message:
            self.sleep(self.poll_interval)
            self.poll_count += 1
            # Transport failures raise out of here and end the job.
            operation = self.service.poll_video(operation)
            if not operation.done and not operation.error_message:
                yield self._transition(VideoJobStatus.POLLING)

        if operation.error_message:
            raise ServiceError(f"Video generation failed: {operation.error_message}")
        if not operation.video_uri:
            raise ServiceError("Video generation failed to produce a valid link.")
        return operation
