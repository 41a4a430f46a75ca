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

import pytest

from config.default import Default
from models.gemini import GeminiStudioService

config = Default()

if not (config.GEMINI_API_KEY or config.PROJECT_ID):
    print("Skipping test: neither GEMINI_API_KEY nor PROJECT_ID is set.")
    pytest.skip("No Gemini credentials configured", allow_module_level=True)


@pytest.mark.integration
def test_concept_and_image_generation_live():
    """Generates a concept from a topic, then an image from that concept."""
    service = GeminiStudioService(config=config)

    concept = service.generate_concept([], "cinematic-poster", topic="A lighthouse in a storm")
    print(f"\nConcept: {concept[:200]}...")
    assert concept

    image_base64 = service.generate_image(concept, "cinematic-poster", [], "16:9")
    image_bytes = base64.b64decode(image_base64)
    print(f"Generated image: {len(image_bytes)} bytes")
    assert len(image_bytes) > 1000

    if os.environ.get("SAVE_INTEGRATION_OUTPUT"):
        with open("integration_output.png", "wb") as f:
            f.write(image_bytes)
