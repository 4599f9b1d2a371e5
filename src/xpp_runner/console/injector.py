"""
Console input injection.

Synthesizes keyboard events directly into the OS console input buffer
behind a standard-input handle. Any process reading that console,
including a child sharing it, sees the key as if it had been typed.

Only Windows has a console input buffer; elsewhere the detached API
reports that no console is present and nothing is ever written.
"""

from __future__ import annotations

import ctypes
import sys
from typing import Any

from xpp_runner.utils.logging import get_logger
from xpp_runner.utils.protocols import ConsoleApiProtocol

logger = get_logger(__name__)

STD_INPUT_HANDLE = -10
KEY_EVENT = 0x0001
VK_RETURN = 0x0D
SCAN_RETURN = 0x1C


class KEY_EVENT_RECORD(ctypes.Structure):
	_fields_ = [
	    ("bKeyDown", ctypes.c_int32),
	    ("wRepeatCount", ctypes.c_uint16),
	    ("wVirtualKeyCode", ctypes.c_uint16),
	    ("wVirtualScanCode", ctypes.c_uint16),
	    # WCHAR is 16 bits on Windows; c_wchar is not on every host
	    ("UnicodeChar", ctypes.c_uint16),
	    ("dwControlKeyState", ctypes.c_uint32),
	]


class _INPUT_EVENT(ctypes.Union):
	_fields_ = [
	    ("KeyEvent", KEY_EVENT_RECORD),
	    ("_raw", ctypes.c_byte * 16),
	]


class INPUT_RECORD(ctypes.Structure):
	_fields_ = [
	    ("EventType", ctypes.c_uint16),
	    ("Event", _INPUT_EVENT),
	]


def build_key_records(virtual_key: int, scan_code: int,
                      char: str) -> ctypes.Array:
	"""
	Build a key-down + key-up pair for one keystroke.

	Parameters:
		virtual_key: Virtual key code (e.g. VK_RETURN).
		scan_code: Hardware scan code for the key.
		char: Character the key produces.

	Returns:
		ctypes array of two INPUT_RECORDs, down first.
	"""
	records = (INPUT_RECORD * 2)()
	for record, down in zip(records, (True, False)):
		record.EventType = KEY_EVENT
		key = record.Event.KeyEvent
		key.bKeyDown = 1 if down else 0
		key.wRepeatCount = 1
		key.wVirtualKeyCode = virtual_key
		key.wVirtualScanCode = scan_code
		key.UnicodeChar = ord(char)
		key.dwControlKeyState = 0
	return records


class Win32ConsoleApi:
	"""kernel32 console input calls through ctypes."""

	def __init__(self) -> None:
		kernel32 = ctypes.WinDLL("kernel32", use_last_error=True)

		self._get_std_handle = kernel32.GetStdHandle
		self._get_std_handle.argtypes = [ctypes.c_int32]
		self._get_std_handle.restype = ctypes.c_void_p

		self._get_console_mode = kernel32.GetConsoleMode
		self._get_console_mode.argtypes = [
		    ctypes.c_void_p,
		    ctypes.POINTER(ctypes.c_uint32)
		]
		self._get_console_mode.restype = ctypes.c_int32

		self._write_console_input = kernel32.WriteConsoleInputW
		self._write_console_input.argtypes = [
		    ctypes.c_void_p,
		    ctypes.POINTER(INPUT_RECORD),
		    ctypes.c_uint32,
		    ctypes.POINTER(ctypes.c_uint32),
		]
		self._write_console_input.restype = ctypes.c_int32

	def get_std_input_handle(self) -> Any:
		return self._get_std_handle(STD_INPUT_HANDLE)

	def get_console_mode(self, handle: Any) -> int | None:
		mode = ctypes.c_uint32()
		if not self._get_console_mode(handle, ctypes.byref(mode)):
			logger.debug("GetConsoleMode failed (error %d)",
			             ctypes.get_last_error())
			return None
		return mode.value

	def write_console_input(self, handle: Any, records: Any,
	                        count: int) -> int:
		written = ctypes.c_uint32()
		if not self._write_console_input(handle, records, count,
		                                 ctypes.byref(written)):
			logger.debug("WriteConsoleInputW failed (error %d)",
			             ctypes.get_last_error())
		return written.value


class DetachedConsoleApi:
	"""Console API stand-in for hosts without a console input buffer."""

	def get_std_input_handle(self) -> Any:
		return None

	def get_console_mode(self, handle: Any) -> int | None:
		return None

	def write_console_input(self, handle: Any, records: Any,
	                        count: int) -> int:
		return 0


def default_console_api() -> ConsoleApiProtocol:
	"""Return the console API for the current platform."""
	if sys.platform == "win32":
		return Win32ConsoleApi()
	return DetachedConsoleApi()


class ConsoleInputBuffer:
	"""
	The console input buffer shared with a child process.

	One instance is created per invocation and handed to the supervisor;
	nothing else writes to the buffer while the child runs.
	"""

	def __init__(self, api: ConsoleApiProtocol, handle: Any) -> None:
		self.api = api
		self.handle = handle

	@classmethod
	def from_std_input(
	        cls,
	        api: ConsoleApiProtocol | None = None) -> ConsoleInputBuffer:
		"""Wrap the standard-input handle of this process."""
		api = api or default_console_api()
		return cls(api, api.get_std_input_handle())

	def is_console(self) -> bool:
		"""Return True if the handle refers to an actual console device.

		A failed console-mode query means input is redirected and
		synthetic injection can never work.
		"""
		try:
			return self.api.get_console_mode(self.handle) is not None
		except OSError as exc:
			logger.debug("console mode query raised: %s", exc)
			return False

	def inject_key(self, virtual_key: int, scan_code: int, char: str) -> int:
		"""
		Append one key-down and one key-up event in a single write.

		Returns:
			Number of events written; less than 2 signals a failure.
		"""
		records = build_key_records(virtual_key, scan_code, char)
		try:
			written = self.api.write_console_input(self.handle, records,
			                                       len(records))
		except OSError as exc:
			logger.debug("console input write raised: %s", exc)
			return 0
		if written != len(records):
			logger.debug("console input write: %d of %d events", written,
			             len(records))
		return written

	def inject_enter(self) -> int:
		"""Inject a single Enter keystroke."""
		return self.inject_key(VK_RETURN, SCAN_RETURN, "\r")


__all__ = [
    "INPUT_RECORD",
    "KEY_EVENT_RECORD",
    "VK_RETURN",
    "SCAN_RETURN",
    "build_key_records",
    "Win32ConsoleApi",
    "DetachedConsoleApi",
    "default_console_api",
    "ConsoleInputBuffer",
]
