"""Platform-specific detection of the focused application."""

from __future__ import annotations

import logging
import subprocess
import sys
import threading
from abc import ABC, abstractmethod
from datetime import timedelta
from typing import Optional

import psutil

logger = logging.getLogger(__name__)

UNKNOWN_APPLICATION = "Unknown"

_OSASCRIPT_FRONTMOST = (
    'tell application "System Events" to get name of first application process '
    "whose frontmost is true"
)


class LatestValue:
    """Single-slot cell shared by the poller thread and the control loop."""

    def __init__(self, initial: str) -> None:
        self._lock = threading.Lock()
        self._value = initial

    def get(self) -> str:
        with self._lock:
            return self._value

    def set(self, value: str) -> None:
        with self._lock:
            self._value = value


class ActiveAppDetector(ABC):
    """Answers "which application has focus right now?" without blocking."""

    @abstractmethod
    def get_active_application(self) -> str:
        raise NotImplementedError

    def start(self) -> None:
        """Begin background observation, if the detector needs any."""

    def stop(self) -> None:
        """Stop background observation."""


class StaticAppDetector(ActiveAppDetector):
    """Reports a fixed name; used on unsupported platforms."""

    def __init__(self, name: str = UNKNOWN_APPLICATION) -> None:
        self.name = name

    def get_active_application(self) -> str:
        return self.name


class PollingAppDetector(ActiveAppDetector):
    """Queries the OS on a daemon thread and caches the latest answer."""

    def __init__(self, poll_interval: timedelta = timedelta(milliseconds=500)) -> None:
        self.poll_interval = poll_interval
        self._latest = LatestValue(UNKNOWN_APPLICATION)
        self._stop_event = threading.Event()
        self._thread: Optional[threading.Thread] = None

    @abstractmethod
    def query(self) -> Optional[str]:
        """Return the focused application's name, or ``None`` if unavailable."""

    def get_active_application(self) -> str:
        return self._latest.get()

    def poll_once(self) -> None:
        try:
            name = self.query()
        except Exception:
            logger.exception("Active application query failed; keeping previous value.")
            return
        if name:
            self._latest.set(name)

    def start(self) -> None:
        if self._thread and self._thread.is_alive():
            return
        self._stop_event.clear()
        self.poll_once()
        thread = threading.Thread(
            target=self._run, name=f"{type(self).__name__}-poller", daemon=True
        )
        self._thread = thread
        thread.start()
        logger.debug("%s polling every %ss", type(self).__name__, self.poll_interval.total_seconds())

    def stop(self) -> None:
        self._stop_event.set()
        thread = self._thread
        self._thread = None
        if thread and thread is not threading.current_thread():
            thread.join(timeout=self.poll_interval.total_seconds() * 2 + 1)

    def _run(self) -> None:
        interval = self.poll_interval.total_seconds()
        while not self._stop_event.wait(interval):
            self.poll_once()


class WindowsAppDetector(PollingAppDetector):
    """Foreground window's process name via Win32 and psutil."""

    def __init__(self, poll_interval: timedelta = timedelta(milliseconds=500)) -> None:
        super().__init__(poll_interval)
        import ctypes

        self._ctypes = ctypes
        self._user32 = ctypes.windll.user32  # type: ignore[attr-defined]

    def query(self) -> Optional[str]:
        from ctypes import wintypes

        hwnd = self._user32.GetForegroundWindow()
        if not hwnd:
            return None

        pid = wintypes.DWORD()
        self._user32.GetWindowThreadProcessId(hwnd, self._ctypes.byref(pid))
        if pid.value:
            try:
                return psutil.Process(pid.value).name()
            except (psutil.Error, ProcessLookupError):
                pass

        length = self._user32.GetWindowTextLengthW(hwnd)
        buffer = self._ctypes.create_unicode_buffer(length + 1)
        self._user32.GetWindowTextW(hwnd, buffer, length + 1)
        return buffer.value.strip() or None


class MacOSAppDetector(PollingAppDetector):
    """Frontmost application process name via ``osascript``."""

    def query(self) -> Optional[str]:
        result = subprocess.run(
            ["osascript", "-e", _OSASCRIPT_FRONTMOST],
            capture_output=True,
            text=True,
            timeout=5,
            check=False,
        )
        if result.returncode != 0:
            return None
        return result.stdout.strip() or None


class LinuxAppDetector(PollingAppDetector):
    """Active X11 window's process name via ``xdotool`` and psutil."""

    def query(self) -> Optional[str]:
        result = subprocess.run(
            ["xdotool", "getactivewindow", "getwindowpid"],
            capture_output=True,
            text=True,
            timeout=5,
            check=False,
        )
        if result.returncode != 0:
            return None
        try:
            pid = int(result.stdout.strip())
        except ValueError:
            return None
        try:
            return psutil.Process(pid).name() or None
        except (psutil.Error, ProcessLookupError):
            return None


def create_app_detector(
    poll_interval: timedelta = timedelta(milliseconds=500),
    platform: Optional[str] = None,
) -> ActiveAppDetector:
    """Pick the detector for the running platform."""
    platform = platform or sys.platform
    if platform == "win32":
        return WindowsAppDetector(poll_interval)
    if platform == "darwin":
        return MacOSAppDetector(poll_interval)
    if platform.startswith("linux"):
        return LinuxAppDetector(poll_interval)
    logger.warning("No active window support for %s; reporting '%s'.", platform, UNKNOWN_APPLICATION)
    return StaticAppDetector()
