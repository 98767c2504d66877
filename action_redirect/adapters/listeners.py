"""
Redirect listeners.
"""

from __future__ import annotations

import logging

logger = logging.getLogger(__name__)


class LoggingRedirectListener:
    """Logs every redirect sent."""

    def __init__(self, level: int = logging.INFO) -> None:
        self._level = level

    def response_redirected(self, url: str) -> None:
        logger.log(self._level, "Response redirected to %s", url)
