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

"""Refinement suggestion list."""

import typing

import mesop as me


def pick_suggestion(
    suggestions: typing.Sequence[str],
    index: int,
    on_select: typing.Callable[[str], typing.Any],
) -> str | None:
    """Passes the suggestion at `index` to `on_select` and returns it.

    Out of range indexes select nothing.
    """
    if not 0 <= index < len(suggestions):
        return None
    chosen = suggestions[index]
    on_select(chosen)
    return chosen


@me.component
def refinement_suggestions(
    *,
    suggestions: list[str],
    is_open: bool,
    on_select: typing.Callable[[me.ClickEvent], typing.Any],
):
    """Renders the suggestions as buttons keyed by their index."""
    if not is_open:
        return
    with me.box(
        style=me.Style(
            background=me.theme_var("surface-container"),
            border_radius=8,
            box_shadow=me.theme_var("shadow_elevation_2"),
            display="flex",
            flex_direction="column",
            margin=me.Margin(top=4),
            padding=me.Padding.all(4),
        )
    ):
        for index, suggestion in enumerate(suggestions):
            me.button(
                suggestion,
                key=str(index),
                on_click=on_select,
                style=me.Style(justify_content="flex-start", text_align="left", width="100%"),
            )
