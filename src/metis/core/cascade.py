from __future__ import annotations

import logging
from collections.abc import Iterable
from typing import Protocol

logger = logging.getLogger(__name__)


class JobDependentRepository(Protocol):
    collection: str

    def delete_by_job_id(self, job_id: str) -> int: ...


def cascade_delete_job(job_id: str, dependents: Iterable[JobDependentRepository]) -> dict[str, int]:
    """Remove every record that references ``job_id`` from the dependent collections.

    Each collection is rewritten on its own; a crash part-way through can
    leave some dependents behind.
    """
    removed: dict[str, int] = {}
    for repository in dependents:
        removed[repository.collection] = repository.delete_by_job_id(job_id)

    if any(removed.values()):
        logger.info("Removed records for deleted job %s: %s", job_id, removed)
    return removed
