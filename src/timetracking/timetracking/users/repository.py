from __future__ import annotations

from typing import Optional, Protocol

from .model import Worker


class WorkerRepository(Protocol):
    def get_by_id(self, worker_id: str, company_id: str) -> Optional[Worker]:
        raise NotImplementedError
