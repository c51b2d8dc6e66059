# src/taskboard/tasks/share.py

from __future__ import annotations

import logging

from ..core.ports import Clipboard

logger = logging.getLogger(__name__)


class ShareLinkGenerator:
    def __init__(self, base_url: str) -> None:
        self._base_url = (base_url or "").rstrip("/")

    def link(self, task_id: str) -> str:
        return f"{self._base_url}/task/{task_id}"

    async def share(self, task_id: str, clipboard: Clipboard) -> str:
        """Copy the task link to the clipboard and return it."""
        url = self.link(task_id)
        await clipboard.write_text(url)
        logger.debug("Share link copied task=%s", task_id)
        return url
