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

"""Full screen gallery of saved images."""

import typing

import mesop as me

from common.downloads import artifact_filename, download_anchor
from workflows.image_studio.studio_state import GeneratedArtifact


@me.component
def gallery_dialog(
    *,
    is_open: bool,
    entries: list[GeneratedArtifact],
    on_close: typing.Callable[[me.ClickEvent], typing.Any],
):
    """Render the gallery, most recent save first."""

    with me.box(
        style=me.Style(
            background="rgba(0, 0, 0, 0.7)",
            display="flex" if is_open else "none",
            align_items="center",
            justify_content="center",
            height="100%",
            left=0,
            top=0,
            position="fixed",
            width="100%",
            z_index=1000,
        ),
    ):
        with me.box(
            style=me.Style(
                background=me.theme_var("surface"),
                border_radius=12,
                box_shadow=me.theme_var("shadow_elevation_2"),
                display="flex",
                flex_direction="column",
                width="90vw",
                height="90vh",
                position="relative",
            )
        ):
            with me.content_button(
                on_click=on_close,
                style=me.Style(position="absolute", top=12, right=12, z_index=1),
            ):
                me.icon("close")

            with me.box(style=me.Style(padding=me.Padding.all(24), height="100%", overflow_y="auto")):
                me.text("My Gallery", type="headline-5")
                if not entries:
                    me.text(
                        "Your saved creations will appear here.",
                        style=me.Style(color=me.theme_var("on-surface-variant"), margin=me.Margin(top=16)),
                    )
                    return
                with me.box(
                    style=me.Style(
                        display="grid",
                        grid_template_columns="repeat(auto-fill, minmax(220px, 1fr))",
                        gap=16,
                        margin=me.Margin(top=16),
                    )
                ):
                    for entry in entries:
                        with me.box(key=f"gallery/{entry.id}", style=me.Style(display="flex", flex_direction="column", gap=8)):
                            me.image(
                                src=f"data:image/png;base64,{entry.image_base64}",
                                alt=entry.prompt,
                                style=me.Style(width="100%", border_radius=8, object_fit="cover"),
                            )
                            me.html(download_anchor(entry.image_base64, artifact_filename(entry.id)))
