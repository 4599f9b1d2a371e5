from xpp_runner.console.injector import (
    ConsoleInputBuffer,
    DetachedConsoleApi,
    KEY_EVENT,
    SCAN_RETURN,
    VK_RETURN,
    build_key_records,
)


class FakeConsoleApi:
	"""Records every write; reports a console unless told otherwise."""

	def __init__(self, mode=3, short_write=False, raise_on_write=False):
		self.mode = mode
		self.short_write = short_write
		self.raise_on_write = raise_on_write
		self.writes = []

	def get_std_input_handle(self):
		return "stdin-handle"

	def get_console_mode(self, handle):
		return self.mode

	def write_console_input(self, handle, records, count):
		if self.raise_on_write:
			raise OSError("handle closed")
		self.writes.append((handle, [records[i] for i in range(count)]))
		return 1 if self.short_write else count


def test_build_key_records_down_then_up():
	records = build_key_records(VK_RETURN, SCAN_RETURN, "\r")
	assert len(records) == 2
	down, up = records[0].Event.KeyEvent, records[1].Event.KeyEvent
	assert records[0].EventType == KEY_EVENT
	assert records[1].EventType == KEY_EVENT
	assert down.bKeyDown == 1
	assert up.bKeyDown == 0
	for key in (down, up):
		assert key.wVirtualKeyCode == 0x0D
		assert key.wVirtualScanCode == 0x1C
		assert key.UnicodeChar == 13
		assert key.wRepeatCount == 1
		assert key.dwControlKeyState == 0


def test_inject_enter_writes_both_events_in_one_call():
	api = FakeConsoleApi()
	buffer = ConsoleInputBuffer.from_std_input(api)
	assert buffer.is_console() is True
	assert buffer.inject_enter() == 2
	assert len(api.writes) == 1
	handle, records = api.writes[0]
	assert handle == "stdin-handle"
	assert [r.Event.KeyEvent.bKeyDown for r in records] == [1, 0]
	assert all(r.Event.KeyEvent.wVirtualKeyCode == VK_RETURN for r in records)


def test_short_write_is_reported():
	buffer = ConsoleInputBuffer(FakeConsoleApi(short_write=True), None)
	assert buffer.inject_enter() == 1


def test_write_error_is_swallowed():
	buffer = ConsoleInputBuffer(FakeConsoleApi(raise_on_write=True), None)
	assert buffer.inject_enter() == 0


def test_redirected_input_is_not_a_console():
	buffer = ConsoleInputBuffer(FakeConsoleApi(mode=None), None)
	assert buffer.is_console() is False


def test_detached_api_writes_nothing():
	buffer = ConsoleInputBuffer.from_std_input(DetachedConsoleApi())
	assert buffer.is_console() is False
	assert buffer.inject_enter() == 0
