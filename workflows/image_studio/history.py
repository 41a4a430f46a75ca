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

import dataclasses
from typing import List, Optional

from workflows.image_studio.studio_state import GeneratedArtifact, WorkflowState


class ArtifactHistory:
    """Generated images, the selection pointer and the gallery of saves."""

    def __init__(self, state: WorkflowState):
        self.state = state

    def __len__(self) -> int:
        return len(self.state.history)

    def items(self) -> List[GeneratedArtifact]:
        return list(self.state.history)

    def get(self, artifact_id: Optional[str]) -> Optional[GeneratedArtifact]:
        if not artifact_id:
            return None
        return next((a for a in self.state.history if a.id == artifact_id), None)

    def append(self, artifact: GeneratedArtifact) -> GeneratedArtifact:
        """Adds an artifact at the end. Never reorders or deduplicates."""
        self.state.history.append(artifact)
        return artifact

    def append_and_select(self, artifact: GeneratedArtifact) -> GeneratedArtifact:
        self.append(artifact)
        self.state.selected_artifact_id = artifact.id
        return artifact

    def select(self, artifact_id: str) -> bool:
        """Points the selection at `artifact_id`. Unknown ids are ignored."""
        if self.get(artifact_id) is None:
            return False
        self.state.selected_artifact_id = artifact_id
        return True

    def selected(self) -> Optional[GeneratedArtifact]:
        """The selected artifact, or None when the pointer is void."""
        return self.get(self.state.selected_artifact_id)

    def latest(self) -> Optional[GeneratedArtifact]:
        return self.state.history[-1] if self.state.history else None

    def promote_to_gallery(self, artifact_id: str) -> Optional[GeneratedArtifact]:
        """Copies an artifact to the front of the gallery.

        History and selection are left untouched.
        """
        artifact = self.get(artifact_id)
        if artifact is None:
            return None
        entry = dataclasses.replace(artifact)
        self.state.gallery.insert(0, entry)
        return entry

    def gallery(self) -> List[GeneratedArtifact]:
        return list(self.state.gallery)

    def clear(self) -> None:
        """Drops history and selection. The gallery is kept."""
        self.state.history = []
        self.state.selected_artifact_id = None
