from pathlib import Path

import anyio

from dir_access.models import AccessControlType, AccessRule, Identity, LockingProcess, SecurityId
from dir_access.rights import FileSystemRights

USER = SecurityId.account("user:1000")
OTHER_USER = SecurityId.account("user:2000")
STAFF = SecurityId.group("group:100")
IDENTITY = Identity(principal=USER, groups=frozenset({STAFF}))


def allow(subject: SecurityId, rights: int = FileSystemRights.FULL_CONTROL) -> AccessRule:
    return AccessRule(subject=subject, rights=int(rights), access_type=AccessControlType.ALLOW)


def deny(subject: SecurityId, rights: int = FileSystemRights.FULL_CONTROL) -> AccessRule:
    return AccessRule(subject=subject, rights=int(rights), access_type=AccessControlType.DENY)


class FakeFilesystem:
    """In-memory DirectoryBackend that records every call."""

    def __init__(self) -> None:
        self.children: dict[Path, list[Path]] = {}
        self.files: dict[Path, list[Path]] = {}
        self.rules: dict[Path, list[AccessRule]] = {}
        self.rule_errors: dict[Path, OSError] = {}
        self.list_errors: dict[Path, OSError] = {}
        self.make_errors: dict[Path, OSError] = {}
        self.calls: list[tuple[str, Path]] = []

    def add_dir(self, path: Path, rules: list[AccessRule] | None = None) -> Path:
        self.children.setdefault(path, [])
        self.files.setdefault(path, [])
        self.rules[path] = [allow(USER)] if rules is None else rules
        parent_children = self.children.get(path.parent)
        if parent_children is not None and path not in parent_children:
            parent_children.append(path)
        return path

    def add_file(self, path: Path) -> Path:
        self.files[path.parent].append(path)
        return path

    def remove_dir(self, path: Path) -> None:
        self.children.pop(path, None)
        self.files.pop(path, None)
        self.rules.pop(path, None)

    def count(self, op: str) -> int:
        return sum(1 for name, _ in self.calls if name == op)

    def exists(self, path: Path) -> bool:
        return path in self.children

    def list_directories(self, path: Path) -> list[Path]:
        self.calls.append(("list_directories", path))
        if path in self.list_errors:
            raise self.list_errors[path]
        return list(self.children[path])

    def list_files(self, path: Path) -> list[Path]:
        self.calls.append(("list_files", path))
        if path in self.list_errors:
            raise self.list_errors[path]
        return list(self.files[path])

    def get_access_rules(self, path: Path) -> list[AccessRule]:
        self.calls.append(("get_access_rules", path))
        if path in self.rule_errors:
            raise self.rule_errors[path]
        if path not in self.rules:
            raise FileNotFoundError(path)
        return list(self.rules[path])

    def make_directory(self, path: Path) -> None:
        self.calls.append(("make_directory", path))
        if path in self.make_errors:
            raise self.make_errors[path]
        self.add_dir(path)


class FakeLockInspector:
    """LockInspector whose processes exit after a configured delay."""

    def __init__(self) -> None:
        self.locks: dict[Path, list[LockingProcess]] = {}
        self.exit_after: dict[int, float] = {}
        self.exited: list[int] = []

    def lock(self, path: Path, pid: int, exit_after: float = 0.0, name: str = "proc") -> None:
        self.locks.setdefault(path, []).append(LockingProcess(pid=pid, name=name))
        self.exit_after[pid] = exit_after

    def is_file_locked(self, path: Path) -> bool:
        return bool(self.locks.get(path))

    def locking_processes(self, path: Path) -> list[LockingProcess]:
        return list(self.locks.get(path, []))

    async def wait_process_exit(self, process: LockingProcess) -> None:
        await anyio.sleep(self.exit_after[process.pid])
        self.exited.append(process.pid)
