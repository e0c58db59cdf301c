"""Entry point wiring access checks, traversal and lock waiting together."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Iterator, Optional

import anyio

from dir_access.access import AccessEvaluator
from dir_access.config import Settings
from dir_access.filesystem import DirectoryBackend, LocalFilesystem
from dir_access.locks import LockInspector, LockWaitCoordinator, ProcLockInspector
from dir_access.models.identity import Identity
from dir_access.models.locking_process import LockingProcess
from dir_access.rights import FileSystemRights
from dir_access.traversal import DirectoryWalker

# Default for wait_for_unlock: take the timeout from the settings. None means no timeout.
USE_SETTINGS: Any = object()


class DirectoryAccess:
    def __init__(
        self,
        settings: Settings | None = None,
        *,
        backend: DirectoryBackend | None = None,
        inspector: LockInspector | None = None,
        identity: Optional[Identity] = None,
    ) -> None:
        self.settings: Settings = settings or Settings()
        self.backend: DirectoryBackend = backend if backend is not None else LocalFilesystem()
        self.evaluator: AccessEvaluator = AccessEvaluator(
            self.backend,
            policy=self.settings.policy,
            identity=identity,
        )
        self.walker: DirectoryWalker = DirectoryWalker(self.evaluator)
        if inspector is None:
            inspector = ProcLockInspector(poll_interval=self.settings.lock_wait.poll_interval)
        self.locks: LockWaitCoordinator = LockWaitCoordinator(inspector, self.backend)

    def can_access(
        self,
        directory: Path,
        identity: Optional[Identity] = None,
        rights: int = FileSystemRights.MODIFY,
    ) -> bool:
        return self.evaluator.can_access(directory, identity, rights)

    def ensure_directory(self, directory: Path) -> bool:
        return self.evaluator.ensure_directory(directory)

    def iter_accessible_subtree(
        self,
        root: Path,
        rights: int = FileSystemRights.LIST_DIRECTORY,
    ) -> Iterator[Path]:
        return self.walker.iter_accessible_subtree(root, rights)

    def list_accessible_subtree(
        self,
        root: Path,
        rights: int = FileSystemRights.LIST_DIRECTORY,
    ) -> list[Path]:
        return self.walker.list_accessible_subtree(root, rights)

    async def list_accessible_subtree_async(
        self,
        root: Path,
        rights: int = FileSystemRights.LIST_DIRECTORY,
        cancel: anyio.Event | None = None,
    ) -> list[Path]:
        return await self.walker.list_accessible_subtree_async(root, rights, cancel=cancel)

    def list_all_accessible(self, root: Path) -> list[Path]:
        return self.walker.list_all_accessible(root)

    def has_locked_descendant(self, directory: Path) -> bool:
        return self.locks.has_locked_descendant(directory)

    def locking_processes(self, directory: Path) -> list[LockingProcess]:
        return self.locks.locking_processes(directory)

    async def wait_for_unlock(
        self,
        directory: Path,
        timeout: float | None = USE_SETTINGS,
        cancel: anyio.Event | None = None,
    ) -> bool:
        if timeout is USE_SETTINGS:
            timeout = self.settings.lock_wait.timeout
        return await self.locks.wait_for_unlock(directory, timeout, cancel)
