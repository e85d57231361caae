from __future__ import annotations

import logging
from typing import Mapping, Optional

import requests

from ..contracts import ModuleUploader
from ..errors import TransportError


logger = logging.getLogger(__name__)


class HttpModuleUploader(ModuleUploader):
    def __init__(self, *, timeout_s: float = 120, session: Optional[requests.Session] = None):
        self.timeout_s = timeout_s
        self.session = session if session is not None else requests.Session()

    def put(self, url: str, content: bytes, headers: Mapping[str, str]) -> int:
        try:
            r = self.session.put(url, data=content, headers=dict(headers), timeout=self.timeout_s)
        except requests.RequestException as e:
            raise TransportError(f"Module upload failed: {e}") from e
        logger.debug("PUT module upload bytes=%d status=%s", len(content), r.status_code)
        return int(r.status_code)
