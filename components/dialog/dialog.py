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


@me.content_component
def dialog(is_open: bool):
    """Modal dialog. Put the body and a `dialog_actions` block inside."""
    with me.box(
        style=me.Style(
            background="rgba(0, 0, 0, 0.6)",
            display="block" if is_open else "none",
            height="100%",
            left=0,
            top=0,
            overflow_y="auto",
            position="fixed",
            width="100%",
            z_index=1000,
        )
    ):
        with me.box(
            style=me.Style(
                align_items="center",
                display="grid",
                height="100vh",
                justify_items="center",
            )
        ):
            with me.box(
                style=me.Style(
                    background=me.theme_var("surface-container-lowest"),
                    border_radius=12,
                    box_shadow=me.theme_var("shadow_elevation_2"),
                    max_width=400,
                    padding=me.Padding.all(24),
                    text_align="center",
                )
            ):
                me.slot()


@me.content_component
def dialog_actions():
    with me.box(
        style=me.Style(
            display="flex",
            justify_content="center",
            gap=16,
            margin=me.Margin(top=24),
        )
    ):
        me.slot()
