from __future__ import annotations

from typing import Optional, Protocol

from .model import Site


class SiteRepository(Protocol):
    def get_by_id(self, site_id: str, company_id: str) -> Optional[Site]:
        raise NotImplementedError
