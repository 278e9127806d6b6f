"""Generative-language collaborators used for task suggestions."""

from smart_workflow.ai.base import TextGenerator
from smart_workflow.ai.gemini import GeminiClient
from smart_workflow.ai.prompts import ADMIN_PROMPT, USER_PROMPT, build_prompt

__all__ = ["ADMIN_PROMPT", "USER_PROMPT", "GeminiClient", "TextGenerator", "build_prompt"]
