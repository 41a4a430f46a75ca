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

import typing

import mesop as me

from common.downloads import download_anchor, processed_filename


def action_key(kind: str, action: str, image_id: str) -> str:
    return f"{kind}-{action}/{image_id}"


def image_id_from_key(key: str) -> str:
    """Inverse of `action_key`."""
    return key.partition("/")[2]


@me.component
def image_preview_card(
    *,
    kind: str,
    image_id: str,
    name: str,
    src: str,
    on_remove: typing.Callable[[me.ClickEvent], typing.Any],
    on_remove_background: typing.Callable[[me.ClickEvent], typing.Any] | None = None,
    download_payload: str | None = None,
    disabled: bool = False,
):
    """Thumbnail of an uploaded or processed image with its actions."""
    with me.box(
        style=me.Style(
            background=me.theme_var("surface-container"),
            border_radius=8,
            display="flex",
            flex_direction="column",
            gap=4,
            padding=me.Padding.all(8),
            width=150,
        )
    ):
        me.image(
            src=src,
            alt=name,
            style=me.Style(width="100%", height=120, object_fit="contain", border_radius=6),
        )
        me.text(name, style=me.Style(font_size=12, overflow_x="hidden", white_space="nowrap"))
        with me.box(style=me.Style(display="flex", flex_direction="row", gap=4, align_items="center")):
            with me.content_button(
                key=action_key(kind, "remove", image_id),
                on_click=on_remove,
                type="icon",
                disabled=disabled,
            ):
                me.icon("delete")
            if on_remove_background:
                with me.content_button(
                    key=action_key(kind, "remove-background", image_id),
                    on_click=on_remove_background,
                    type="icon",
                    disabled=disabled,
                ):
                    me.icon("auto_fix_high")
            if download_payload:
                me.html(download_anchor(download_payload, processed_filename(name)))
