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

import json

from common.analytics import get_logger
from config.default import Default, get_config_path

logger = get_logger(__name__)


class ImageStudioConfig:
    """Prompt templates for the image studio, loaded once per process."""

    _instance = None
    _prompts_data = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super(ImageStudioConfig, cls).__new__(cls)
            cls._instance._load_prompts()
        return cls._instance

    def _load_prompts(self):
        """Loads the prompt templates from the JSON file."""
        prompts_path = get_config_path(Default().PROMPTS_FILE)
        with open(prompts_path, "r") as f:
            self._prompts_data = json.load(f)
        logger.info(f"Loaded {len(self._prompts_data)} prompt templates from {prompts_path}")

    def get_prompt(self, key: str) -> str:
        """Returns a prompt template by key."""
        if key not in self._prompts_data:
            raise KeyError(f"Prompt template '{key}' is not defined.")
        return self._prompts_data[key]

    def render(self, key: str, **values) -> str:
        """Formats a prompt template with the given values."""
        return self.get_prompt(key).format(**values)
