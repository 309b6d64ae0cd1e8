"""Workflow text templates: task titles, descriptions and notification text (Jinja).

Placeholders are written as {{name}}. Names that do not resolve against the
context are kept as literal text exactly as written. Text Jinja cannot parse
(a stray {# or {%) falls back to plain name substitution, so a cosmetic
problem never fails an action or hides the entity title.
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from datetime import date
from typing import Any

from jinja2 import ChainableUndefined, Environment, Template, TemplateError

from app.domain.entities.subject import TriggerSubject
from app.shared.telemetry.logging import get_logger

logger = get_logger(__name__)

_PLACEHOLDER_RE = re.compile(r"\{\{(.*?)\}\}", re.DOTALL)
_DOTTED_NAME_RE = re.compile(r"^\s*([A-Za-z_]\w*(?:\.[A-Za-z_]\w*)*)\s*$")
_MAX_COMPILED = 512


def build_placeholder_context(
    subject: TriggerSubject,
    *,
    workflow_name: str,
    today: date,
    days_before: int | None = None,
    due_date: date | None = None,
) -> dict[str, Any]:
    """Context for subject-driven templates.

    Flat keys: <entity_type>_<field> (event_title, task_status, ...),
    entity_title, workflow_name, due_date, days_before, today. Nested keys:
    entity.<field> and <entity_type>.<field>.
    """
    prefix = subject.entity_type.value
    attributes = {k: _display(v) for k, v in subject.attributes.items()}
    context: dict[str, Any] = {f"{prefix}_{key}": value for key, value in attributes.items()}
    context.update(
        {
            prefix: attributes,
            "entity": attributes,
            "entity_title": subject.title,
            "entity_type": prefix,
            "entity_id": subject.id,
            "workflow_name": workflow_name,
            "today": today.isoformat(),
            "due_date": due_date.isoformat() if due_date else None,
            "days_before": days_before,
        }
    )
    return context


def _display(value: Any) -> Any:
    if isinstance(value, date):
        return value.isoformat()
    return value


def _resolve(context: Mapping[str, Any], dotted: str) -> Any:
    current: Any = context
    for part in dotted.split("."):
        if not isinstance(current, Mapping):
            return None
        current = current.get(part)
        if current is None:
            return None
    return current


class WorkflowTemplateRenderer:
    """Renders workflow text templates against a placeholder context."""

    def __init__(self, env: Environment | None = None) -> None:
        self._env = env or Environment(
            autoescape=False,
            undefined=ChainableUndefined,
            keep_trailing_newline=True,
        )
        self._compiled: dict[str, Template] = {}

    def _protect_unresolved(self, text: str, context: Mapping[str, Any]) -> str:
        """Wrap placeholders whose name does not resolve in {% raw %} so they render literally."""

        def replace(m: re.Match[str]) -> str:
            name = _DOTTED_NAME_RE.match(m.group(1))
            if name is None:
                # Expressions (filters, calls) are left to Jinja.
                return m.group(0)
            if _resolve(context, name.group(1)) is None:
                return "{% raw %}" + m.group(0) + "{% endraw %}"
            return m.group(0)

        return _PLACEHOLDER_RE.sub(replace, text)

    @staticmethod
    def _substitute_names(text: str, context: Mapping[str, Any]) -> str:
        """Replace resolvable {{name}} placeholders; everything else stays literal."""

        def replace(m: re.Match[str]) -> str:
            name = _DOTTED_NAME_RE.match(m.group(1))
            if name is None:
                return m.group(0)
            value = _resolve(context, name.group(1))
            return m.group(0) if value is None else str(value)

        return _PLACEHOLDER_RE.sub(replace, text)

    def _compile(self, source: str) -> Template:
        template = self._compiled.get(source)
        if template is None:
            if len(self._compiled) >= _MAX_COMPILED:
                self._compiled.clear()
            template = self._env.from_string(source)
            self._compiled[source] = template
        return template

    def render(self, text: str | None, context: Mapping[str, Any]) -> str | None:
        """Render text; None stays None."""
        if text is None:
            return None
        if "{" not in text:
            return text
        source = self._protect_unresolved(text, context)
        try:
            return self._compile(source).render(**context)
        except TemplateError as e:
            logger.debug("Template text rendered without Jinja (%s): %r", e, text)
            return self._substitute_names(text, context)
