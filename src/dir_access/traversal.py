"""Recursive directory enumeration pruned by access checks."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterator

import anyio
import anyio.lowlevel
import anyio.to_thread

from dir_access.access import AccessEvaluator
from dir_access.errors import OperationCancelledError
from dir_access.rights import FileSystemRights


logger = logging.getLogger(__name__)


def raise_if_cancelled(cancel: anyio.Event | None) -> None:
    if cancel is not None and cancel.is_set():
        raise OperationCancelledError("Operation was cancelled.")


class DirectoryWalker:
    """
    Depth-first, pre-order walks. The subtree walks never descend into a
    directory failing the access check, so descendants that are accessible
    below a denied directory are not reported.
    """

    def __init__(self, evaluator: AccessEvaluator) -> None:
        self._evaluator: AccessEvaluator = evaluator

    @property
    def evaluator(self) -> AccessEvaluator:
        return self._evaluator

    def iter_accessible_subtree(
        self,
        root: Path,
        rights: int = FileSystemRights.LIST_DIRECTORY,
        *,
        include_root: bool = False,
    ) -> Iterator[Path]:
        self._require_root(root)
        return self._iter_from_root(root, rights, include_root)

    def list_accessible_subtree(
        self,
        root: Path,
        rights: int = FileSystemRights.LIST_DIRECTORY,
        *,
        include_root: bool = False,
    ) -> list[Path]:
        return list(self.iter_accessible_subtree(root, rights, include_root=include_root))

    async def list_accessible_subtree_async(
        self,
        root: Path,
        rights: int = FileSystemRights.LIST_DIRECTORY,
        *,
        cancel: anyio.Event | None = None,
        include_root: bool = False,
    ) -> list[Path]:
        raise_if_cancelled(cancel)
        if not await anyio.to_thread.run_sync(self._root_accessible, root, rights):
            return []
        found: list[Path] = [root] if include_root else []
        found.extend(await self._expand_async(root, rights, cancel))
        return found

    def list_all_accessible(self, root: Path) -> list[Path]:
        """
        Every descendant of root that can be listed, found without pruning:
        a listable directory below a denied one is still reported.
        """
        if not self._root_accessible(root, FileSystemRights.LIST_DIRECTORY):
            return []
        return [
            directory
            for directory in self._walk_unpruned(root)
            if self._check(directory, FileSystemRights.LIST_DIRECTORY)
        ]

    def _require_root(self, root: Path) -> None:
        if root is None:
            raise ValueError("root directory is required.")
        if not self._evaluator.backend.exists(root):
            raise FileNotFoundError(f"Directory {root} does not exist.")

    def _root_accessible(self, root: Path, rights: int) -> bool:
        self._require_root(root)
        return self._evaluator.can_access(root, rights=rights)

    def _iter_from_root(self, root: Path, rights: int, include_root: bool) -> Iterator[Path]:
        if not self._evaluator.can_access(root, rights=rights):
            return
        if include_root:
            yield root
        yield from self._walk(root, rights)

    def _walk(self, parent: Path, rights: int) -> Iterator[Path]:
        for child in self._list_children(parent):
            if self._check(child, rights):
                yield child
                yield from self._walk(child, rights)

    def _walk_unpruned(self, parent: Path) -> Iterator[Path]:
        for child in self._list_children(parent):
            yield child
            yield from self._walk_unpruned(child)

    async def _expand_async(self, parent: Path, rights: int, cancel: anyio.Event | None) -> list[Path]:
        raise_if_cancelled(cancel)
        await anyio.lowlevel.checkpoint()
        raise_if_cancelled(cancel)
        children = await anyio.to_thread.run_sync(self._accessible_children, parent, rights)
        found: list[Path] = []
        for child in children:
            raise_if_cancelled(cancel)
            found.append(child)
            found.extend(await self._expand_async(child, rights, cancel))
        return found

    def _accessible_children(self, parent: Path, rights: int) -> list[Path]:
        return [child for child in self._list_children(parent) if self._check(child, rights)]

    def _list_children(self, parent: Path) -> list[Path]:
        try:
            return self._evaluator.backend.list_directories(parent)
        except PermissionError:
            logger.debug("No permission to list %s", parent)
        except OSError as exc:
            logger.debug("Error listing %s: %s", parent, exc)
        return []

    def _check(self, directory: Path, rights: int) -> bool:
        try:
            return self._evaluator.can_access(directory, rights=rights)
        except FileNotFoundError:
            logger.debug("Directory %s vanished during traversal", directory)
            return False
