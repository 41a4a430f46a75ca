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
"""AI Image Studio page: upload, ideate, generate, refine and animate."""

import time
from dataclasses import field

import mesop as me

from common.analytics import get_logger, log_ui_click, track_click
from common.downloads import artifact_filename, download_anchor, video_filename
from common.error_handling import InvalidRequestError
from components.dialog.dialog import dialog, dialog_actions
from components.gallery_dialog.gallery_dialog import gallery_dialog
from components.image_preview_card.image_preview_card import image_id_from_key, image_preview_card
from components.loading_overlay.loading_overlay import loading_overlay
from components.refinement_suggestions.refinement_suggestions import (
    pick_suggestion,
    refinement_suggestions,
)
from config.default import Default as cfg
from config.studio_options import (
    ANIMATION_STYLES,
    ASPECT_RATIOS,
    MAX_VIDEO_DURATION,
    MIN_VIDEO_DURATION,
    OUTPUT_TYPES,
    REFINEMENT_SUGGESTIONS,
    WORKFLOW_STEPS,
)
from models.gemini import get_generation_service
from models.requests import ImageUpload
from state.state import AppState
from workflows.image_studio.backend import StudioWorkflow
from workflows.image_studio.studio_state import WorkflowState, WorkflowStep

logger = get_logger(__name__)

@me.stateclass
class PageState:
    """Image Studio Page State"""

    # pylint: disable=E3701:invalid-field-call

    workflow: WorkflowState = field(default_factory=WorkflowState)


def _workflow() -> StudioWorkflow:
    return StudioWorkflow(me.state(PageState).workflow, service=get_generation_service())


def _dispatch(operation):
    """Runs a workflow operation, reporting precondition failures to the user."""
    workflow = _workflow()
    try:
        yield from operation(workflow)
    except InvalidRequestError as e:
        workflow.state.notification = e.message
        yield


def _image_src(image_base64: str) -> str:
    return f"data:image/png;base64,{image_base64}"


# Rendering


def _step_indicator(current_step: int):
    with me.box(style=me.Style(display="flex", flex_direction="column", gap=16)):
        for step in WORKFLOW_STEPS:
            active = current_step >= step.id
            with me.box(style=me.Style(display="flex", flex_direction="row", gap=12, align_items="center")):
                with me.box(
                    style=me.Style(
                        background=me.theme_var("primary") if active else me.theme_var("outline-variant"),
                        color=me.theme_var("on-primary"),
                        border_radius="50%",
                        width=36,
                        height=36,
                        display="flex",
                        align_items="center",
                        justify_content="center",
                    )
                ):
                    me.text(str(step.id))
                with me.box():
                    me.text(step.title, style=me.Style(font_weight="bold"))
                    me.text(step.description, style=me.Style(font_size=12))


def _configure_section(state: WorkflowState):
    me.text("1. Configure Your Design", type="headline-6")
    with me.box(style=me.Style(display="flex", flex_direction="row", gap=16)):
        me.select(
            label="Aspect Ratio",
            options=[me.SelectOption(label=o.label, value=o.key) for o in ASPECT_RATIOS.values()],
            value=state.aspect_ratio,
            on_selection_change=on_aspect_ratio_change,
            style=me.Style(flex_grow=1),
        )
        me.select(
            label="Output Type",
            options=[me.SelectOption(label=o.label, value=o.key) for o in OUTPUT_TYPES.values()],
            value=state.output_type,
            on_selection_change=on_output_type_change,
            style=me.Style(flex_grow=1),
        )

    me.text("2. Get Creative Ideas (Optional)", type="headline-6")
    me.input(
        label="Topic (optional, if no image)",
        value=state.topic,
        on_blur=on_topic_blur,
        style=me.Style(width="100%"),
    )
    me.button(
        "Generate Creative Concepts",
        on_click=on_get_concepts_click,
        type="flat",
        disabled=state.busy,
    )
    me.textarea(
        label="Creative concept",
        placeholder="AI-generated concepts will appear here... (or write your own)",
        rows=6,
        value=state.creative_concept,
        on_blur=on_concept_blur,
        style=me.Style(width="100%", margin=me.Margin(top=16)),
    )
    me.button(
        "Generate Image",
        on_click=on_generate_click,
        type="raised",
        disabled=state.busy or (not state.processed and not state.creative_concept.strip()),
    )
    me.text(
        "The creative concept is optional. If left blank, we'll generate an image based on "
        "your uploaded images and selected output type.",
        style=me.Style(font_size=12),
    )


def _refine_section(state: WorkflowState):
    me.text("3. Refine Your Creation", type="headline-6")
    with me.box(style=me.Style(display="flex", flex_direction="row", gap=8, align_items="center")):
        me.textarea(
            label="Refinement",
            placeholder="e.g., 'Change background to a forest at sunset'",
            rows=3,
            value=state.refinement_prompt,
            on_blur=on_refinement_blur,
            style=me.Style(flex_grow=1),
        )
        with me.content_button(on_click=on_toggle_suggestions, type="icon"):
            me.icon("lightbulb")
    refinement_suggestions(
        suggestions=REFINEMENT_SUGGESTIONS,
        is_open=state.suggestions_open,
        on_select=on_suggestion_click,
    )
    me.button(
        "Apply Refinement",
        on_click=on_refine_click,
        type="flat",
        disabled=state.busy or not state.refinement_prompt.strip(),
    )


def _reference_images(state: WorkflowState):
    if not state.uploaded and not state.processed:
        return
    me.text("Reference images", type="headline-6")
    with me.box(style=me.Style(display="flex", flex_wrap="wrap", gap=8)):
        for image in state.processed:
            image_preview_card(
                kind="processed",
                image_id=image.id,
                name=image.name,
                src=image.preview_handle,
                on_remove=on_remove_processed,
                on_remove_background=on_remove_background_click,
                download_payload=image.preview_handle,
                disabled=state.busy,
            )
    if state.uploaded:
        me.text("Originals", style=me.Style(font_size=14, margin=me.Margin(top=8)))
        with me.box(style=me.Style(display="flex", flex_wrap="wrap", gap=8)):
            for image in state.uploaded:
                image_preview_card(
                    kind="upload",
                    image_id=image.id,
                    name=image.name,
                    src=image.preview_handle,
                    on_remove=on_remove_upload,
                    disabled=state.busy,
                )


def _result_panel(workflow: StudioWorkflow):
    state = workflow.state
    selected = workflow.history.selected()
    if selected is None:
        me.text(
            "Your creation will appear here.",
            style=me.Style(color=me.theme_var("on-surface-variant"), padding=me.Padding.all(24)),
        )
        return

    me.image(
        src=_image_src(selected.image_base64),
        alt=selected.prompt,
        style=me.Style(width="100%", max_height="70vh", object_fit="contain", border_radius=8),
    )
    with me.box(style=me.Style(display="flex", flex_direction="row", gap=8, margin=me.Margin(top=8))):
        me.button("New Variation", on_click=on_variation_click, type="stroked", disabled=state.busy)
        me.button("Save to Gallery", on_click=on_save_to_gallery_click, type="stroked")
        me.html(download_anchor(selected.image_base64, artifact_filename(selected.id)))

    if len(state.history) > 1:
        with me.box(style=me.Style(display="flex", flex_direction="row", gap=8, overflow_x="auto", margin=me.Margin(top=16))):
            for artifact in state.history:
                is_selected = artifact.id == selected.id
                with me.box(
                    key=f"history/{artifact.id}",
                    on_click=on_history_click,
                    style=me.Style(
                        border=me.Border.all(
                            me.BorderSide(
                                width=3,
                                style="solid",
                                color=me.theme_var("secondary") if is_selected else "transparent",
                            )
                        ),
                        border_radius=8,
                        cursor="pointer",
                    ),
                ):
                    me.image(
                        src=_image_src(artifact.image_base64),
                        style=me.Style(width=80, height=80, object_fit="cover", border_radius=6),
                    )

    me.text("Animate", type="headline-6", style=me.Style(margin=me.Margin(top=16)))
    with me.box(style=me.Style(display="flex", flex_direction="row", gap=16, align_items="center")):
        me.select(
            label="Duration (seconds)",
            options=[
                me.SelectOption(label=str(s), value=str(s))
                for s in range(MIN_VIDEO_DURATION, MAX_VIDEO_DURATION + 1)
            ],
            value=str(state.video_duration),
            on_selection_change=on_video_duration_change,
        )
        me.select(
            label="Animation Style",
            options=[me.SelectOption(label=s, value=s) for s in ANIMATION_STYLES],
            value=state.animation_style,
            on_selection_change=on_animation_style_change,
        )
        me.button("Generate Video", on_click=on_generate_video_click, type="flat", disabled=state.busy)

    if state.video.handle:
        me.video(key=state.video.handle, src=state.video.handle, style=me.Style(width="100%", margin=me.Margin(top=16)))
        me.html(download_anchor(state.video.handle, video_filename(state.video.artifact_id)))


def image_studio_page_content():
    """Renders the main UI for the Image Studio page."""
    workflow = _workflow()
    state = workflow.state

    if state.busy:
        loading_overlay(message=state.busy_message)

    gallery_dialog(is_open=state.gallery_open, entries=state.gallery, on_close=on_close_gallery)

    with dialog(is_open=state.start_over_confirm_open):  # pylint: disable=not-context-manager
        me.text("Start Over?", type="headline-6")
        me.text("Are you sure you want to start over? All current progress will be lost.")
        with dialog_actions():  # pylint: disable=not-context-manager
            me.button("Cancel", on_click=on_cancel_start_over, type="stroked")
            me.button("Start Over", on_click=on_confirm_start_over, type="flat")

    with me.box(style=me.Style(display="flex", flex_direction="column", gap=16, padding=me.Padding.all(16))):
        with me.box(style=me.Style(display="flex", flex_direction="row", justify_content="space-between", align_items="center")):
            me.text(cfg().APP_TITLE, type="headline-4")
            with me.box(style=me.Style(display="flex", flex_direction="row", gap=8)):
                me.button("My Gallery", on_click=on_open_gallery, type="stroked")
                with me.content_button(on_click=on_start_over_click, type="icon"):
                    me.icon("refresh")

        if state.notification:
            with me.box(
                style=me.Style(
                    background=me.theme_var("inverse-surface"),
                    color=me.theme_var("inverse-on-surface"),
                    border_radius=8,
                    display="flex",
                    justify_content="space-between",
                    align_items="center",
                    padding=me.Padding.all(12),
                )
            ):
                me.text(state.notification)
                with me.content_button(on_click=on_dismiss_notification, type="icon"):
                    me.icon("close")

        with me.box(style=me.Style(display="flex", flex_direction="row", gap=16)):
            with me.box(style=me.Style(width=280, **_panel_kwargs())):
                _step_indicator(state.step)

            with me.box(style=me.Style(flex_grow=1, display="flex", flex_direction="column", gap=16, **_panel_kwargs())):
                if state.step == WorkflowStep.UPLOAD:
                    me.text("Upload Your Image", type="headline-5")
                    me.text("Start by uploading one or more images.")
                me.uploader(
                    label="Upload Images",
                    on_upload=on_upload,
                    multiple=True,
                    accepted_file_types=["image/*"],
                    disabled=state.busy,
                )
                _reference_images(state)
                if state.step >= WorkflowStep.CONFIGURE:
                    _configure_section(state)
                if state.step == WorkflowStep.REVIEW and workflow.history.selected():
                    _refine_section(state)

            with me.box(style=me.Style(width="40%", **_panel_kwargs())):
                _result_panel(workflow)


def _panel_kwargs() -> dict:
    return {
        "background": me.theme_var("surface-container-lowest"),
        "border_radius": 12,
        "padding": me.Padding.all(16),
    }


# Event handlers


def on_upload(e: me.UploadEvent):
    """Adds the uploaded files to the session."""
    # UploadedFile has no modification time, so ids are stable within one batch only.
    received_at = int(time.time() * 1000)
    uploads = [
        ImageUpload(
            name=f.name,
            mime_type=f.mime_type,
            data=f.getvalue(),
            last_modified=received_at,
        )
        for f in e.files
    ]
    added = _workflow().add_uploads(uploads)
    if len(added) < len(uploads):
        me.state(PageState).workflow.notification = "Only image files can be uploaded."
    yield


def on_remove_upload(e: me.ClickEvent):
    _workflow().remove_upload(image_id_from_key(e.key))
    yield


def on_remove_processed(e: me.ClickEvent):
    _workflow().remove_processed(image_id_from_key(e.key))
    yield


@track_click(element_id="image_studio_remove_background")
def on_remove_background_click(e: me.ClickEvent):
    yield from _dispatch(lambda wf: wf.request_background_removal(image_id_from_key(e.key)))


def on_aspect_ratio_change(e: me.SelectSelectionChangeEvent):
    _workflow().set_aspect_ratio(e.value)


def on_output_type_change(e: me.SelectSelectionChangeEvent):
    _workflow().set_output_type(e.value)


def on_video_duration_change(e: me.SelectSelectionChangeEvent):
    _workflow().set_video_duration(int(e.value))


def on_animation_style_change(e: me.SelectSelectionChangeEvent):
    _workflow().set_animation_style(e.value)


def on_topic_blur(e: me.InputBlurEvent):
    _workflow().set_topic(e.value)


def on_concept_blur(e: me.InputBlurEvent):
    _workflow().set_creative_concept(e.value)


def on_refinement_blur(e: me.InputBlurEvent):
    _workflow().set_refinement_prompt(e.value)


@track_click(element_id="image_studio_concepts")
def on_get_concepts_click(e: me.ClickEvent):
    yield from _dispatch(lambda wf: wf.request_concept())


@track_click(element_id="image_studio_generate")
def on_generate_click(e: me.ClickEvent):
    yield from _dispatch(lambda wf: wf.request_generation())


@track_click(element_id="image_studio_variation")
def on_variation_click(e: me.ClickEvent):
    yield from _dispatch(lambda wf: wf.request_variation())


@track_click(element_id="image_studio_refine")
def on_refine_click(e: me.ClickEvent):
    yield from _dispatch(lambda wf: wf.request_refinement())


@track_click(element_id="image_studio_video")
def on_generate_video_click(e: me.ClickEvent):
    yield from _dispatch(lambda wf: wf.request_video())


def on_history_click(e: me.ClickEvent):
    _workflow().select_artifact(e.key.partition("/")[2])
    yield


def on_save_to_gallery_click(e: me.ClickEvent):
    _workflow().save_to_gallery()
    yield


def on_toggle_suggestions(e: me.ClickEvent):
    _workflow().toggle_suggestions()
    yield


def on_suggestion_click(e: me.ClickEvent):
    workflow = _workflow()
    pick_suggestion(REFINEMENT_SUGGESTIONS, int(e.key), workflow.choose_suggestion)
    app_state = me.state(AppState)
    log_ui_click(
        element_id=f"refinement_suggestion_{e.key}",
        page_name=app_state.current_page,
        session_id=app_state.session_id,
    )
    yield


def on_open_gallery(e: me.ClickEvent):
    _workflow().set_gallery_open(True)
    yield


def on_close_gallery(e: me.ClickEvent):
    _workflow().set_gallery_open(False)
    yield


def on_start_over_click(e: me.ClickEvent):
    _workflow().open_start_over_confirm()
    yield


def on_cancel_start_over(e: me.ClickEvent):
    _workflow().cancel_start_over()
    yield


@track_click(element_id="image_studio_start_over")
def on_confirm_start_over(e: me.ClickEvent):
    _workflow().confirm_start_over()
    yield


def on_dismiss_notification(e: me.ClickEvent):
    _workflow().dismiss_notification()
    yield


def on_load(e: me.LoadEvent):
    me.state(AppState).current_page = "/"
    yield


@me.page(
    path="/",
    title="AI Image Studio",
    on_load=on_load,
)
def page():
    """Define the Mesop page route for the Image Studio."""
    image_studio_page_content()
