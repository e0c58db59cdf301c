"""Discovery of locked files under a directory and waiting for their release."""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Iterator, Protocol

import anyio
import anyio.to_thread

from dir_access.errors import OperationCancelledError
from dir_access.filesystem import DirectoryBackend, LocalFilesystem
from dir_access.models.locking_process import LockingProcess, LockOwnership
from dir_access.traversal import raise_if_cancelled


logger = logging.getLogger(__name__)

LockKey = tuple[int, int, int]  # device major, device minor, inode


class LockInspector(Protocol):
    def is_file_locked(self, path: Path) -> bool: ...

    def locking_processes(self, path: Path) -> list[LockingProcess]: ...

    async def wait_process_exit(self, process: LockingProcess) -> None: ...


def parse_proc_locks(text: str) -> dict[LockKey, list[int]]:
    """
    Parse the held locks listed in /proc/locks.
    Blocked waiters ("->" lines) and OFD locks without an owning pid are skipped.
    """
    held: dict[LockKey, list[int]] = {}
    for line in text.splitlines():
        fields = line.split()
        if len(fields) < 6 or fields[1] == "->":
            continue
        try:
            pid = int(fields[4])
            major, minor, inode = fields[5].split(":")
            key = (int(major, 16), int(minor, 16), int(inode))
        except ValueError:
            logger.debug("Skipping unparsable lock entry: %r", line)
            continue
        if pid <= 0:
            continue
        pids = held.setdefault(key, [])
        if pid not in pids:
            pids.append(pid)
    return held


class ProcLockInspector:
    """LockInspector backed by Linux /proc."""

    def __init__(self, proc_root: Path = Path("/proc"), poll_interval: float = 0.1) -> None:
        self.proc_root: Path = proc_root
        self.poll_interval: float = poll_interval

    def _held_locks(self) -> dict[LockKey, list[int]]:
        return parse_proc_locks((self.proc_root / "locks").read_text(encoding="utf-8"))

    def _key(self, path: Path) -> LockKey:
        st = os.stat(path)
        return (os.major(st.st_dev), os.minor(st.st_dev), st.st_ino)

    def is_file_locked(self, path: Path) -> bool:
        try:
            key = self._key(path)
        except FileNotFoundError:
            return False
        return key in self._held_locks()

    def locking_processes(self, path: Path) -> list[LockingProcess]:
        try:
            key = self._key(path)
        except FileNotFoundError:
            return []
        pids = self._held_locks().get(key, [])
        return [LockingProcess(pid=pid, name=self.process_name(pid)) for pid in pids]

    def process_name(self, pid: int) -> str:
        try:
            return (self.proc_root / str(pid) / "comm").read_text(encoding="utf-8").strip()
        except OSError:
            return ""

    def has_exited(self, pid: int) -> bool:
        try:
            stat = (self.proc_root / str(pid) / "stat").read_text(encoding="utf-8")
        except (FileNotFoundError, ProcessLookupError):
            return True
        except OSError as exc:
            # The entry exists but is unreadable, so the process is still there.
            logger.debug("Cannot read state of process %s: %s", pid, exc)
            return False
        # Field 3 follows the parenthesised command name, which may contain spaces.
        state = stat.rpartition(")")[2].split()
        return bool(state) and state[0] in ("Z", "X")

    async def wait_process_exit(self, process: LockingProcess) -> None:
        while not self.has_exited(process.pid):
            await anyio.sleep(self.poll_interval)


class LockWaitCoordinator:
    def __init__(self, inspector: LockInspector, backend: DirectoryBackend | None = None) -> None:
        self._inspector: LockInspector = inspector
        self._backend: DirectoryBackend = backend if backend is not None else LocalFilesystem()

    @property
    def inspector(self) -> LockInspector:
        return self._inspector

    def locked_files(self, directory: Path) -> list[Path]:
        self._require_directory(directory)
        return [path for path in self._iter_files(directory) if self._inspector.is_file_locked(path)]

    def has_locked_descendant(self, directory: Path) -> bool:
        self._require_directory(directory)
        return any(self._inspector.is_file_locked(path) for path in self._iter_files(directory))

    def lock_ownership(self, directory: Path) -> LockOwnership:
        owners = {path: tuple(self._inspector.locking_processes(path)) for path in self.locked_files(directory)}
        return LockOwnership(owners=owners)

    def locking_processes(self, directory: Path) -> list[LockingProcess]:
        return self.lock_ownership(directory).processes()

    async def wait_for_unlock(
        self,
        directory: Path,
        timeout: float | None = None,
        cancel: anyio.Event | None = None,
    ) -> bool:
        """
        Wait until every process currently locking a file under directory exits.

        Processes are discovered once, up front. Returns True when all of them
        exited, False when timeout (seconds) elapsed first.
        """
        raise_if_cancelled(cancel)
        processes = await anyio.to_thread.run_sync(self.locking_processes, directory)
        logger.debug("Waiting on %d locking processes under %s", len(processes), directory)
        if timeout is None:
            await self._joint_wait(processes, cancel)
            return True
        with anyio.move_on_after(timeout):
            await self._joint_wait(processes, cancel)
            return True
        return False

    async def _joint_wait(self, processes: list[LockingProcess], cancel: anyio.Event | None) -> None:
        cancelled = False

        async def watch_cancel(event: anyio.Event, scope: anyio.CancelScope) -> None:
            nonlocal cancelled
            await event.wait()
            cancelled = True
            scope.cancel()

        async with anyio.create_task_group() as tg:
            if cancel is not None:
                tg.start_soon(watch_cancel, cancel, tg.cancel_scope)
            async with anyio.create_task_group() as waits:
                for process in processes:
                    waits.start_soon(self._inspector.wait_process_exit, process)
            tg.cancel_scope.cancel()
        if cancelled:
            raise OperationCancelledError("Wait for directory unlock was cancelled.")

    def _require_directory(self, directory: Path) -> None:
        if directory is None:
            raise ValueError("directory is required.")
        if not self._backend.exists(directory):
            raise FileNotFoundError(f"Directory {directory} does not exist.")

    def _iter_directories(self, directory: Path) -> Iterator[Path]:
        yield directory
        try:
            children = self._backend.list_directories(directory)
        except OSError as exc:
            logger.debug("Skipping subdirectories of %s: %s", directory, exc)
            return
        for child in children:
            yield from self._iter_directories(child)

    def _iter_files(self, directory: Path) -> Iterator[Path]:
        for current in self._iter_directories(directory):
            try:
                files = self._backend.list_files(current)
            except OSError as exc:
                logger.debug("Skipping files of %s: %s", current, exc)
                continue
            yield from files
