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

import mesop as me


@me.component
def loading_overlay(message: str):
    """Blocks the page while a remote operation is in flight."""
    with me.box(
        style=me.Style(
            background="rgba(0, 0, 0, 0.7)",
            display="flex",
            flex_direction="column",
            align_items="center",
            justify_content="center",
            gap=16,
            height="100%",
            left=0,
            top=0,
            position="fixed",
            width="100%",
            z_index=1100,
        )
    ):
        me.progress_spinner(diameter=48, stroke_width=4)
        me.text(message or "Working...", style=me.Style(color="white", font_size=18))
