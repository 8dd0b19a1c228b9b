"""Task source backed by a JSON export of the task repository.

Accepted shapes: a top-level list of task objects, or an object with a
``"tasks"`` list.  Each task needs ``id`` and ``title``; ``description``,
``body``, ``tags``, ``status``, ``readiness`` and ``parent_id``/``parentId``
are optional.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import List, Union

from capability_map.domain import Task, TaskSourceError, build_task

logger = logging.getLogger(__name__)


class JsonFileTaskSource:
    """Reads an ordered task snapshot from a JSON file on each ``list_tasks`` call."""

    def __init__(self, path: Union[str, Path]) -> None:
        self._path = Path(path).expanduser()

    @property
    def path(self) -> Path:
        return self._path

    def list_tasks(self) -> List[Task]:
        """Load and convert every task record.

        Raises:
            TaskSourceError: If the file is missing, is not valid JSON, has an
                unexpected shape, or a record lacks ``id``/``title``.
        """
        try:
            data = json.loads(self._path.read_text(encoding="utf-8"))
        except OSError as exc:
            raise TaskSourceError(f"Cannot read task file {self._path}: {exc}") from exc
        except json.JSONDecodeError as exc:
            raise TaskSourceError(f"Task file {self._path} is not valid JSON: {exc}") from exc

        records = data.get("tasks") if isinstance(data, dict) else data
        if not isinstance(records, list):
            raise TaskSourceError(
                f"Task file {self._path} must contain a list of tasks or an object with a 'tasks' list"
            )

        tasks: List[Task] = []
        for i, record in enumerate(records):
            if not isinstance(record, dict):
                raise TaskSourceError(f"Task #{i} in {self._path} is not an object")
            try:
                tasks.append(build_task(record))
            except KeyError as exc:
                raise TaskSourceError(f"Task #{i} in {self._path} is missing field {exc}") from exc
        logger.debug("Loaded %d tasks from %s", len(tasks), self._path)
        return tasks
