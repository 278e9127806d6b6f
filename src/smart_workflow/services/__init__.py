"""Domain services: the progress aggregator, the task chain and the thin CRUD around them."""

from smart_workflow.services.notifications import NotificationEmitter
from smart_workflow.services.progress import ProgressAggregator, compute_progress, weighted_progress
from smart_workflow.services.projects import ProjectService
from smart_workflow.services.suggestions import SuggestionService, parse_model_text
from smart_workflow.services.tasks import TaskService
from smart_workflow.services.users import UserService

__all__ = [
    "NotificationEmitter",
    "ProgressAggregator",
    "ProjectService",
    "SuggestionService",
    "TaskService",
    "UserService",
    "compute_progress",
    "parse_model_text",
    "weighted_progress",
]
