"""Core workflow components: configuration, types, exceptions."""

from smart_workflow.core.config import WorkflowConfig
from smart_workflow.core.exceptions import *  # noqa: F403
from smart_workflow.core.exceptions import __all__ as exceptions__all__
from smart_workflow.core.types import *  # noqa: F403
from smart_workflow.core.types import __all__ as types__all__

__all__ = ["WorkflowConfig"]

__all__ += exceptions__all__
__all__ += types__all__
