"""
Form Submit event source

Two paths lead to an emit:

  - the native ``submit`` event, delegated at document level, for ordinary forms;
  - the success signal of a recognised AJAX form plugin. Those forms are
    excluded from the native path so a submission is counted once.

Plugin signals differ in what they hand us:

    Contact Form 7  wpcf7mailsent              the form element (event target)
    WPForms         wpformsAjaxSubmitSuccess   the form element (event target)
    Gravity Forms   gform_confirmation_loaded  detail.formId, looked up in the DOM
    Ninja Forms     nfFormSubmitResponse       detail.response.data.form_id + settings.title
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any, NamedTuple

import soupsieve as sv
from bs4 import Tag

from traffic_source.constants import (
    AJAX_FORM_MARKERS,
    CF7_MAIL_SENT_EVENT,
    GRAVITY_CONFIRMATION_EVENT,
    NINJA_SUBMIT_RESPONSE_EVENT,
    SOURCE_FORM_SUBMIT,
    UNKNOWN_FORM_LABEL,
    WPFORMS_SUCCESS_EVENT,
)
from traffic_source.exceptions import IntegrationError
from traffic_source.page import DomEvent
from traffic_source.schemas.config import FormSubmitSource, TrackedEvent
from traffic_source.sources.base import Emit, EventSourceHandler, SourceMeta
from traffic_source.utils.selectors import safe_closest

logger = logging.getLogger(__name__)

_META = SourceMeta(type=SOURCE_FORM_SUBMIT, label="Form Submit", source_model=FormSubmitSource)

_AJAX_FORM_MARKERS = sv.compile(AJAX_FORM_MARKERS)

# Attributes consulted, in order, when no plugin title is available
_LABEL_ATTRIBUTES = ("title", "aria-label", "id", "name", "role", "action")

# Resolves a plugin signal to the submitted form
PluginResolver = Callable[[DomEvent, Tag], "ResolvedForm"]


def form_label(form: Tag, override: str | None = None) -> str:
    """Primary value for a form: plugin title, then identifying attributes, then a fallback."""
    if override and override.strip():
        return override.strip()
    for attribute in _LABEL_ATTRIBUTES:
        value = form.get(attribute)
        if isinstance(value, list):
            value = " ".join(value)
        if value and str(value).strip():
            return str(value).strip()
    return UNKNOWN_FORM_LABEL


def is_ajax_plugin_form(form: Tag) -> bool:
    return _AJAX_FORM_MARKERS.closest(form) is not None


def _form_in(element: Tag) -> Tag:
    """The element itself if it is a form, else the first form inside it, else the element."""
    if element.name == "form":
        return element
    return element.find("form") or element


# ── Plugin resolvers ──────────────────────────────────────────────────────────


class ResolvedForm(NamedTuple):
    """What a plugin signal resolves to."""

    element: Tag
    override: str | None
    form_id: str | None


def _resolve_event_target(integration: str) -> PluginResolver:
    def resolve(event: DomEvent, document: Tag) -> ResolvedForm:
        if not isinstance(event.target, Tag):
            raise IntegrationError(integration, "event has no target form element")
        form = _form_in(event.target)
        return ResolvedForm(form, None, form.get("id"))

    return resolve


def _gravity_title(document: Tag, form_id: str) -> str | None:
    wrapper = document.find(id=f"gform_wrapper_{form_id}")
    title = wrapper.select_one(".gform_title") if wrapper is not None else None
    return title.get_text(strip=True) if title is not None else None


def _resolve_gravity_form(event: DomEvent, document: Tag) -> ResolvedForm:
    form_id = event.detail.get("formId")
    if form_id is None or not str(form_id).strip().isdigit():
        raise IntegrationError("Gravity Forms", "confirmation event carries no numeric formId", {"formId": form_id})

    form_id = str(form_id).strip()
    # After an AJAX submit Gravity Forms may have replaced the form with its confirmation
    for element_id in (f"gform_{form_id}", f"gform_wrapper_{form_id}", f"gform_confirmation_wrapper_{form_id}"):
        element = document.find(id=element_id)
        if element is not None:
            break
    else:
        raise IntegrationError("Gravity Forms", "form container not found", {"formId": form_id})

    return ResolvedForm(_form_in(element), _gravity_title(document, form_id), f"gform_{form_id}")


def _dig(value: Any, *keys: str) -> Any:
    """Walk nested dicts, returning None as soon as a level is missing."""
    for key in keys:
        if not isinstance(value, dict):
            return None
        value = value.get(key)
    return value


def _resolve_ninja_form(event: DomEvent, document: Tag) -> ResolvedForm:
    form_id = _dig(event.detail, "response", "data", "form_id")
    if form_id is None or str(form_id).strip() == "":
        raise IntegrationError("Ninja Forms", "response carries no data.form_id", {"detail": event.detail})

    container = document.find(id=f"nf-form-{form_id}-cont")
    if container is None:
        raise IntegrationError("Ninja Forms", "form container not found", {"form_id": form_id})

    title = _dig(event.detail, "response", "data", "settings", "title")
    form = _form_in(container)
    return ResolvedForm(form, title if isinstance(title, str) else None, form.get("id"))


PLUGIN_SIGNALS: dict[str, tuple[str, PluginResolver]] = {
    CF7_MAIL_SENT_EVENT: ("Contact Form 7", _resolve_event_target("Contact Form 7")),
    WPFORMS_SUCCESS_EVENT: ("WPForms", _resolve_event_target("WPForms")),
    GRAVITY_CONFIRMATION_EVENT: ("Gravity Forms", _resolve_gravity_form),
    NINJA_SUBMIT_RESPONSE_EVENT: ("Ninja Forms", _resolve_ninja_form),
}


class FormSubmitHandler(EventSourceHandler):
    @property
    def meta(self) -> SourceMeta:
        return _META

    def arm(self, tracked_event: TrackedEvent, source: FormSubmitSource, emit: Emit) -> bool:
        slug = tracked_event.slug
        targets = self._initial_targets(source.selector, slug)
        if not targets:
            return False

        def on_submit(event: DomEvent) -> None:
            form = safe_closest(event.target, source.selector, slug)
            if form is None or is_ajax_plugin_form(form):
                return
            emit(form_label(form))

        self.page.add_event_listener("submit", on_submit)

        # Labels of the forms matched now, by id, for plugins that remove the form on success
        armed_forms = {form["id"]: form_label(form) for form in map(_form_in, targets) if form.get("id")}
        for event_name, (integration, resolver) in PLUGIN_SIGNALS.items():
            listener = self._plugin_listener(slug, source, emit, integration, resolver, armed_forms)
            self.page.add_event_listener(event_name, listener)
        return True

    def _plugin_listener(
        self,
        slug: str,
        source: FormSubmitSource,
        emit: Emit,
        integration: str,
        resolver: PluginResolver,
        armed_forms: dict[str, str],
    ) -> Callable[[DomEvent], None]:
        def on_signal(event: DomEvent) -> None:
            try:
                resolved = resolver(event, self.page.document)
            except IntegrationError as exc:
                logger.warning(
                    "Skipping %s submission for tracked event '%s': %s",
                    integration,
                    slug,
                    exc.message,
                    extra={"slug": slug, "integration": integration},
                )
                return

            if safe_closest(resolved.element, source.selector, slug) is not None:
                emit(form_label(resolved.element, resolved.override))
            elif resolved.form_id in armed_forms:
                emit(form_label(resolved.element, resolved.override or armed_forms[resolved.form_id]))
            else:
                logger.debug(
                    "%s submission of form %s is outside the selector of tracked event '%s'",
                    integration,
                    resolved.form_id or "without id",
                    slug,
                    extra={"slug": slug, "integration": integration},
                )

        return on_signal
