"""Probes for the time elapsed since the last keyboard or mouse input."""

from __future__ import annotations

import logging
import re
import subprocess
import sys
from abc import ABC, abstractmethod
from typing import Optional

logger = logging.getLogger(__name__)

_HID_IDLE_PATTERN = re.compile(r'"HIDIdleTime"\s*=\s*(\d+)')


class IdleProbe(ABC):
    @abstractmethod
    def seconds_since_input(self) -> float:
        raise NotImplementedError

    def safe_seconds_since_input(self) -> float:
        """Like :meth:`seconds_since_input`, but a failing probe reads as "just active"."""
        try:
            return max(0.0, float(self.seconds_since_input()))
        except Exception:
            logger.exception("Failed to query idle state; assuming not idle.")
            return 0.0


class NullIdleProbe(IdleProbe):
    """Always reports fresh input; the user is never idle."""

    def seconds_since_input(self) -> float:
        return 0.0


class WindowsIdleProbe(IdleProbe):
    """Detects idle time using ``GetLastInputInfo``."""

    def __init__(self) -> None:
        import ctypes
        from ctypes import wintypes

        class LASTINPUTINFO(ctypes.Structure):
            _fields_ = [("cbSize", wintypes.UINT), ("dwTime", wintypes.DWORD)]

        self._ctypes = ctypes
        self._info_type = LASTINPUTINFO
        self._user32 = ctypes.windll.user32  # type: ignore[attr-defined]
        self._kernel32 = ctypes.windll.kernel32  # type: ignore[attr-defined]

    def seconds_since_input(self) -> float:
        last_input = self._info_type()
        last_input.cbSize = self._ctypes.sizeof(last_input)
        if not self._user32.GetLastInputInfo(self._ctypes.byref(last_input)):
            raise self._ctypes.WinError()  # type: ignore[attr-defined]
        # dwTime is a 32-bit tick count; compare against the low 32 bits.
        elapsed_ms = (self._kernel32.GetTickCount64() & 0xFFFFFFFF) - last_input.dwTime
        return max(0, elapsed_ms) / 1000.0


class MacOSIdleProbe(IdleProbe):
    """Reads ``HIDIdleTime`` (nanoseconds) from ``ioreg``."""

    def seconds_since_input(self) -> float:
        output = subprocess.run(
            ["ioreg", "-c", "IOHIDSystem", "-d", "4"],
            capture_output=True,
            text=True,
            timeout=5,
            check=True,
        ).stdout
        match = _HID_IDLE_PATTERN.search(output)
        if not match:
            raise RuntimeError("HIDIdleTime not found in ioreg output")
        return int(match.group(1)) / 1_000_000_000


class LinuxIdleProbe(IdleProbe):
    """Uses ``xprintidle`` (milliseconds) on X11 sessions."""

    def seconds_since_input(self) -> float:
        output = subprocess.run(
            ["xprintidle"], capture_output=True, text=True, timeout=5, check=True
        ).stdout
        return int(output.strip()) / 1000.0


def create_idle_probe(platform: Optional[str] = None) -> IdleProbe:
    platform = platform or sys.platform
    if platform == "win32":
        return WindowsIdleProbe()
    if platform == "darwin":
        return MacOSIdleProbe()
    if platform.startswith("linux"):
        return LinuxIdleProbe()
    logger.warning("No idle detection for %s; the user is never reported idle.", platform)
    return NullIdleProbe()
