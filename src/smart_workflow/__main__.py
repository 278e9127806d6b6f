"""Run the service: ``python -m smart_workflow``."""
from __future__ import annotations

import uvicorn

from smart_workflow.api.app import create_app
from smart_workflow.core.config import WorkflowConfig


def main() -> None:
    config = WorkflowConfig()
    app = create_app(config)
    uvicorn.run(app, host=config.host, port=config.port, log_level=config.log_level.lower())


if __name__ == "__main__":
    main()
