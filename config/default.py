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

"""Application defaults, read from the environment."""

import os
from dataclasses import dataclass, field
from pathlib import Path

from dotenv import load_dotenv

load_dotenv(override=True)

PROJECT_ROOT = Path(__file__).resolve().parent.parent


def _env_bool(name: str, default: bool) -> bool:
    value = os.environ.get(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


def get_config_path(relative_path: str) -> str:
    """Resolves a repository-relative config file path to an absolute path."""
    return str(PROJECT_ROOT / relative_path)


@dataclass
class Default:
    """Defaults class"""

    # pylint: disable=invalid-name

    APP_TITLE: str = os.environ.get("APP_TITLE", "AI Image Studio")

    # Backend selection. An API key targets the Gemini Developer API,
    # otherwise the client is built for Vertex AI.
    GEMINI_API_KEY: str = os.environ.get("GEMINI_API_KEY", os.environ.get("API_KEY", ""))
    USE_VERTEXAI: bool = field(
        default_factory=lambda: _env_bool(
            "USE_VERTEXAI", not os.environ.get("GEMINI_API_KEY", os.environ.get("API_KEY"))
        )
    )
    PROJECT_ID: str = os.environ.get("PROJECT_ID", "")
    LOCATION: str = os.environ.get("LOCATION", "us-central1")

    # Models
    CONCEPT_MODEL: str = os.environ.get("CONCEPT_MODEL", "gemini-2.5-flash")
    IMAGE_MODEL: str = os.environ.get("IMAGE_MODEL", "gemini-2.5-flash-image-preview")
    VIDEO_MODEL: str = os.environ.get("VIDEO_MODEL", "veo-2.0-generate-001")

    # Video operation polling
    VIDEO_POLL_INTERVAL_SECONDS: int = int(os.environ.get("VIDEO_POLL_INTERVAL_SECONDS", "10"))
    VIDEO_FETCH_TIMEOUT_SECONDS: int = int(os.environ.get("VIDEO_FETCH_TIMEOUT_SECONDS", "120"))

    # Preview and video blobs of a session untouched for this long are released.
    HANDLE_IDLE_TTL_SECONDS: int = int(os.environ.get("HANDLE_IDLE_TTL_SECONDS", "7200"))

    PROMPTS_FILE: str = os.environ.get(
        "PROMPTS_FILE", "workflows/image_studio/prompts.json"
    )
