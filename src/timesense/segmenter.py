"""Turns labeled samples into contiguous, non-overlapping time blocks."""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Optional

from .models import ActivityType, TimeBlock

logger = logging.getLogger(__name__)


class SegmenterStoppedError(RuntimeError):
    """Raised when a sample arrives after the segmenter was shut down."""


class Segmenter:
    """Owns the single open block and closes it whenever the effective label changes.

    The effective label is the ``(application, idle)`` pair. A switch of
    application and going idle in the same application both end the block.
    Closed blocks are handed back to the caller, which keeps the period list.
    """

    def __init__(self) -> None:
        self._current: Optional[TimeBlock] = None
        self._force_new = False
        self._stopped = False

    @property
    def current_block(self) -> Optional[TimeBlock]:
        return self._current

    @property
    def stopped(self) -> bool:
        return self._stopped

    def observe(
        self,
        timestamp: datetime,
        application: str,
        activity_type: ActivityType,
        idle: bool,
    ) -> Optional[TimeBlock]:
        """Feed one labeled sample; return the block it closed, if any."""
        if self._stopped:
            raise SegmenterStoppedError("segmenter has been shut down")

        current = self._current
        if current is not None and not self._force_new and current.same_label(application, idle):
            return None

        self._force_new = False

        closed = self._close_current(timestamp)
        self._open(timestamp, application, activity_type, idle)
        return closed

    def request_boundary(self) -> None:
        """End the open block at the next sample, even if its label is unchanged."""
        if self._current is not None:
            self._force_new = True

    def split(self, timestamp: datetime) -> Optional[TimeBlock]:
        """Close the open block at ``timestamp`` and continue it in a new block."""
        current = self._current
        if current is None:
            return None
        closed = self._close_current(timestamp)
        self._open(timestamp, current.application, current.activity_type, current.idle)
        return closed

    def shutdown(self, timestamp: datetime) -> Optional[TimeBlock]:
        closed = self._close_current(timestamp)
        self._force_new = False
        self._stopped = True
        return closed

    def _open(
        self,
        timestamp: datetime,
        application: str,
        activity_type: ActivityType,
        idle: bool,
    ) -> None:
        self._current = TimeBlock(
            start_time=timestamp,
            end_time=timestamp,
            application=application,
            activity_type=activity_type,
            idle=idle,
        )
        logger.debug(
            "Block opened: app=%s activity=%s idle=%s",
            application,
            activity_type.value,
            idle,
        )

    def _close_current(self, timestamp: datetime) -> Optional[TimeBlock]:
        current = self._current
        if current is None:
            return None
        # Clock skew must not produce a negative block.
        current.end_time = max(timestamp, current.start_time)
        self._current = None
        logger.debug("Block closed: app=%s duration=%s", current.application, current.duration)
        return current
