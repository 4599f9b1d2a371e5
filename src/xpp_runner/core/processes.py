"""
Process helpers shared by the supervisor and the stream relay.

Launch preconditions, process-tree termination and liveness checks,
built on psutil.
"""

from __future__ import annotations

import asyncio
import contextlib
import time

import psutil

from xpp_runner.models.invocation import ChildInvocation
from xpp_runner.utils.logging import get_logger

logger = get_logger(__name__)


def launch_problem(invocation: ChildInvocation) -> str | None:
	"""
	Check that a child can be launched at all.

	Returns:
		A description of the missing piece, or None when launchable.
	"""
	if not invocation.executable.is_file():
		return f"executable not found: {invocation.executable}"
	if not invocation.working_dir.is_dir():
		return f"working directory not found: {invocation.working_dir}"
	return None


def _gone(proc: psutil.Process) -> bool:
	# a killed grandchild stays a zombie until its parent reaps it
	try:
		return not proc.is_running() or proc.status() == psutil.STATUS_ZOMBIE
	except psutil.NoSuchProcess:
		return True


def wait_gone(procs: list[psutil.Process],
              timeout: float) -> list[psutil.Process]:
	"""Poll until every process is dead or a zombie; return survivors."""
	deadline = time.monotonic() + timeout
	alive = [p for p in procs if not _gone(p)]
	while alive and time.monotonic() < deadline:
		time.sleep(0.05)
		alive = [p for p in alive if not _gone(p)]
	return alive


def kill_descendants(pid: int, wait_seconds: float = 5.0) -> int:
	"""
	Kill every descendant of ``pid`` and wait for them to go away.

	The process itself is left alone so its owner can kill and reap it
	through its own handle.

	Parameters:
		pid: Root process id.
		wait_seconds: Bounded wait for the killed descendants.

	Returns:
		Number of descendants that were signalled.
	"""
	try:
		children = psutil.Process(pid).children(recursive=True)
	except psutil.NoSuchProcess:
		return 0
	for child in children:
		try:
			child.kill()
		except psutil.NoSuchProcess:
			pass
		except psutil.AccessDenied:
			logger.warning("no permission to kill descendant pid %d",
			               child.pid)
	for proc in wait_gone(children, wait_seconds):
		logger.warning("descendant pid %d survived kill", proc.pid)
	return len(children)


async def terminate_tree(proc: asyncio.subprocess.Process) -> None:
	"""Forcibly kill a child and all its descendants, then reap it."""
	killed = await asyncio.to_thread(kill_descendants, proc.pid)
	if killed:
		logger.info("killed %d descendant(s) of pid %d", killed, proc.pid)
	with contextlib.suppress(ProcessLookupError):
		proc.kill()
	await proc.wait()


def is_process_alive(pid: int | None) -> bool:
	"""Return True if ``pid`` names a running (non-zombie) process."""
	if pid is None or not psutil.pid_exists(pid):
		return False
	try:
		return psutil.Process(pid).status() != psutil.STATUS_ZOMBIE
	except psutil.NoSuchProcess:
		return False


__all__ = [
    "launch_problem",
    "kill_descendants",
    "wait_gone",
    "terminate_tree",
    "is_process_alive",
]
