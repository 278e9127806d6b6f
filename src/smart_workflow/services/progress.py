"""Project progress aggregation.

A project's ``progress`` and ``status`` are never authored by clients: they
are derived from the project's current task set every time one of its tasks
is created, updated or deleted.

Weighted progress
-----------------
A ``done`` task counts 100 %, an ``in-progress`` task 50 %, a ``todo`` task
0 %, averaged over all tasks of the project::

    progress = round_half_up((done * 100 + in_progress * 50) / total)

Rounding is **half-up** and computed in integer arithmetic, so two done, one
in-progress and one todo task give ``62.5 -> 63``. An empty project is
``0 %`` and ``active``. The status is ``completed`` exactly when every task is
done, and is not sticky: reopening a task or adding a new one flips the
project back to ``active``.
"""

from __future__ import annotations

import asyncio
import logging
import weakref
from collections.abc import Iterable
from contextlib import asynccontextmanager
from typing import TYPE_CHECKING

from smart_workflow.core.types import ProjectProgress, ProjectStatus, Task, TaskStatus

if TYPE_CHECKING:
    from collections.abc import AsyncIterator

    from smart_workflow.storage.record_store import RecordStore

logger = logging.getLogger(__name__)


def weighted_progress(done: int, in_progress: int, total: int) -> int:
    """Half-up rounded weighted completion percentage.

    Example:
        ```python
        weighted_progress(done=2, in_progress=1, total=4)   # 63
        weighted_progress(done=0, in_progress=0, total=0)   # 0
        ```
    """
    if total <= 0:
        return 0
    if done < 0 or in_progress < 0 or done + in_progress > total:
        raise ValueError(
            f"Inconsistent task counts: done={done} in_progress={in_progress} total={total}"
        )
    weighted = done * 100 + in_progress * 50
    return (2 * weighted + total) // (2 * total)


def compute_progress(project_id: str, tasks: Iterable[Task]) -> ProjectProgress:
    """Derive progress and status from a project's task set."""
    total = done = in_progress = 0
    for task in tasks:
        total += 1
        if task.status == TaskStatus.DONE:
            done += 1
        elif task.status == TaskStatus.IN_PROGRESS:
            in_progress += 1
    status = (
        ProjectStatus.COMPLETED if total > 0 and done == total else ProjectStatus.ACTIVE
    )
    return ProjectProgress(
        project_id=project_id,
        progress=weighted_progress(done, in_progress, total),
        status=status,
        total=total,
        done=done,
        in_progress=in_progress,
    )


class ProgressAggregator:
    """Recompute and write back a project's derived fields.

    When ``serialize`` is on, recomputations of the same project inside this
    process run one at a time, so two concurrent task mutations cannot
    interleave their read and write-back. Different projects never wait on
    each other.
    """

    def __init__(self, store: RecordStore, *, serialize: bool = True) -> None:
        self.store = store
        self.serialize = serialize
        self._locks: weakref.WeakValueDictionary[str, asyncio.Lock] = weakref.WeakValueDictionary()

    def _lock_for(self, project_id: str) -> asyncio.Lock:
        lock = self._locks.get(project_id)
        if lock is None:
            lock = asyncio.Lock()
            self._locks[project_id] = lock
        return lock

    @asynccontextmanager
    async def project_lock(self, project_id: str) -> AsyncIterator[None]:
        if not self.serialize:
            yield
            return
        async with self._lock_for(project_id):
            yield

    async def recompute_project_progress(self, project_id: str) -> ProjectProgress:
        """Read every task of *project_id* and overwrite ``progress``/``status``.

        The write is unconditional. If the project does not exist the write
        matches nothing and is silently ignored; the computed value is still
        returned. Store failures propagate to the caller.
        """
        async with self.project_lock(project_id):
            tasks = await self.store.tasks.find({"project_id": project_id})
            result = compute_progress(project_id, tasks)
            updated = await self.store.projects.update_fields(
                project_id,
                {"progress": result.progress, "status": result.status},
            )
        if updated is None:
            logger.debug("Progress for missing project %s not written", project_id)
        else:
            logger.info(
                "Project %s progress=%d%% status=%s (%d/%d done, %d in progress)",
                project_id,
                result.progress,
                result.status.value,
                result.done,
                result.total,
                result.in_progress,
            )
        return result


__all__ = ["ProgressAggregator", "compute_progress", "weighted_progress"]
