"""AI task suggestions: prompt, call, parse, normalise, persist.

The model is asked for a JSON array but its answer is not trusted. Parsing
tries, in order:

1. the body of a ```` ```json ```` fence, or the whole text, as JSON;
2. a line heuristic: every non-blank line is ``title: description``, split
   on the first colon.

A single JSON object is wrapped in a list, so callers always get a list.
"""

from __future__ import annotations

import json
import logging
import re
from typing import TYPE_CHECKING, Any

from smart_workflow.ai.prompts import build_prompt
from smart_workflow.core.exceptions import (
    SuggestionGenerationError,
    ValidationFailedError,
    WorkflowError,
)
from smart_workflow.core.types import Suggestion, TaskPriority, UserRole
from smart_workflow.utils.ids import generate_id

if TYPE_CHECKING:
    from smart_workflow.ai.base import TextGenerator
    from smart_workflow.storage.record_store import RecordStore

logger = logging.getLogger(__name__)

_FENCE = re.compile(r"```(?:json)?[ \t]*\r?\n(.*?)\r?\n[ \t]*```", re.DOTALL)

DEFAULT_PRIORITY = TaskPriority.MEDIUM
NO_DESCRIPTION = "No description provided"


def split_lines(text: str) -> list[dict[str, Any]]:
    """Line heuristic used when the model did not answer with JSON."""
    items: list[dict[str, Any]] = []
    for index, line in enumerate(ln for ln in text.split("\n") if ln.strip()):
        title, _, rest = line.partition(":")
        items.append({
            "title": title.strip() or f"Task {index + 1}",
            "description": rest.strip() or NO_DESCRIPTION,
        })
    return items


def parse_model_text(text: str) -> list[Any]:
    """Turn raw model text into a list of suggestion-like items."""
    match = _FENCE.search(text)
    candidate = match.group(1) if match else text
    try:
        parsed = json.loads(candidate)
    except json.JSONDecodeError as exc:
        logger.warning("Model text is not JSON (%s); falling back to line split", exc.msg)
        return split_lines(text)
    return parsed if isinstance(parsed, list) else [parsed]


def _priority(value: Any) -> TaskPriority:
    try:
        return TaskPriority(str(value).strip().lower())
    except ValueError:
        return DEFAULT_PRIORITY


def _hours(value: Any, default: float) -> float:
    try:
        hours = float(value)
    except (TypeError, ValueError):
        return default
    return hours if hours > 0 else default


class SuggestionService:
    """Ask the model for suggestions and keep them for history."""

    def __init__(
        self,
        store: RecordStore,
        generator: TextGenerator,
        *,
        default_hours: float = 5,
        default_role: str = "Developer",
    ) -> None:
        self.store = store
        self.generator = generator
        self.default_hours = default_hours
        self.default_role = default_role

    def normalise(
        self,
        item: Any,
        index: int,
        role: UserRole,
        original_prompt: str,
    ) -> Suggestion:
        """Fill defaults and build one :class:`Suggestion`."""
        if not isinstance(item, dict):
            item = {"title": str(item)} if item not in (None, "") else {}
        suggested_role = None
        if role == UserRole.ADMIN:
            suggested_role = str(item.get("suggestedRole") or self.default_role)
        return Suggestion(
            id=generate_id(Suggestion.id_prefix),
            title=str(item.get("title") or f"Task {index + 1}"),
            description=str(item.get("description") or NO_DESCRIPTION),
            priority=_priority(item.get("priority")),
            estimated_hours=_hours(item.get("estimatedHours"), self.default_hours),
            suggested_role=suggested_role,
            original_prompt=original_prompt,
            generated_for_role=role,
        )

    async def ingest_suggestions(
        self,
        raw_text: str,
        role: UserRole | str,
        original_prompt: str,
    ) -> list[Suggestion]:
        """Parse, normalise and bulk-insert the model's answer."""
        role = UserRole.ADMIN if role == UserRole.ADMIN else UserRole.USER
        items = parse_model_text(raw_text)
        suggestions = [
            self.normalise(item, index, role, original_prompt)
            for index, item in enumerate(items)
        ]
        await self.store.suggestions.insert_many(suggestions)
        logger.info("Stored %d suggestion(s) for %s", len(suggestions), role.value)
        return suggestions

    async def generate_suggestions(
        self,
        project_goal: str | None,
        user_role: str | None = None,
    ) -> list[Suggestion]:
        """Prompt the model for *project_goal* and ingest the answer.

        Raises:
            ValidationFailedError: *project_goal* is empty
            SuggestionGenerationError: The model call or storing the result failed
        """
        if not project_goal or not str(project_goal).strip():
            raise ValidationFailedError("Project goal is required.")
        role = UserRole.ADMIN if user_role == UserRole.ADMIN else UserRole.USER

        try:
            text = await self.generator.generate(build_prompt(role, project_goal))
            return await self.ingest_suggestions(text, role, project_goal)
        except SuggestionGenerationError:
            raise
        except WorkflowError as exc:
            raise SuggestionGenerationError(exc.message, exc.details) from exc
        except Exception as exc:
            logger.error("Suggestion generation failed: %s", exc, exc_info=True)
            raise SuggestionGenerationError(str(exc)) from exc


__all__ = ["SuggestionService", "parse_model_text", "split_lines"]
