"""Filesystem rights flags and generic-rights expansion."""

from __future__ import annotations

from enum import IntFlag


class FileSystemRights(IntFlag):
    READ_DATA = 0x000001
    LIST_DIRECTORY = 0x000001
    WRITE_DATA = 0x000002
    CREATE_FILES = 0x000002
    APPEND_DATA = 0x000004
    CREATE_DIRECTORIES = 0x000004
    READ_EXTENDED_ATTRIBUTES = 0x000008
    WRITE_EXTENDED_ATTRIBUTES = 0x000010
    EXECUTE_FILE = 0x000020
    TRAVERSE = 0x000020
    DELETE_SUBDIRECTORIES_AND_FILES = 0x000040
    READ_ATTRIBUTES = 0x000080
    WRITE_ATTRIBUTES = 0x000100
    DELETE = 0x010000
    READ_PERMISSIONS = 0x020000
    CHANGE_PERMISSIONS = 0x040000
    TAKE_OWNERSHIP = 0x080000
    SYNCHRONIZE = 0x100000

    WRITE = WRITE_DATA | APPEND_DATA | WRITE_EXTENDED_ATTRIBUTES | WRITE_ATTRIBUTES
    READ = READ_DATA | READ_EXTENDED_ATTRIBUTES | READ_ATTRIBUTES | READ_PERMISSIONS
    READ_AND_EXECUTE = READ | EXECUTE_FILE
    MODIFY = WRITE | READ_AND_EXECUTE | DELETE
    FULL_CONTROL = 0x1F01FF


class GenericRights(IntFlag):
    ALL = 0x10000000
    EXECUTE = 0x20000000
    WRITE = 0x40000000
    READ = 0x80000000


# Raw rights value that never grants anything.
NO_RIGHTS_SENTINEL = -1

_GENERIC_EXPANSIONS: tuple[tuple[GenericRights, FileSystemRights], ...] = (
    (
        GenericRights.EXECUTE,
        FileSystemRights.EXECUTE_FILE
        | FileSystemRights.READ_PERMISSIONS
        | FileSystemRights.READ_ATTRIBUTES
        | FileSystemRights.SYNCHRONIZE,
    ),
    (
        GenericRights.READ,
        FileSystemRights.READ_ATTRIBUTES
        | FileSystemRights.READ_DATA
        | FileSystemRights.READ_EXTENDED_ATTRIBUTES
        | FileSystemRights.READ_PERMISSIONS
        | FileSystemRights.SYNCHRONIZE,
    ),
    (
        GenericRights.WRITE,
        FileSystemRights.APPEND_DATA
        | FileSystemRights.WRITE_ATTRIBUTES
        | FileSystemRights.WRITE_DATA
        | FileSystemRights.WRITE_EXTENDED_ATTRIBUTES
        | FileSystemRights.READ_PERMISSIONS
        | FileSystemRights.SYNCHRONIZE,
    ),
    (GenericRights.ALL, FileSystemRights.FULL_CONTROL),
)


def is_generic(mask: int) -> bool:
    return any(mask & generic for generic, _ in _GENERIC_EXPANSIONS)


def normalize_rights(mask: int) -> int:
    """
    Expand generic Read/Write/Execute/All bits into elementary rights.
    Masks without generic bits are returned unchanged.
    """
    mapped = 0
    was_generic = False
    for generic, expansion in _GENERIC_EXPANSIONS:
        if mask & generic:
            mapped |= expansion
            was_generic = True
    return mapped if was_generic else mask


def covers(granted: int, requested: int) -> bool:
    return (granted & requested) == requested


def parse_rights(name: str) -> FileSystemRights:
    """Look up a rights flag by name, e.g. "list_directory" or "MODIFY"."""
    key = name.strip().upper().replace("-", "_")
    try:
        return FileSystemRights[key]
    except KeyError:
        raise ValueError(f"Unknown filesystem right: {name!r}") from None
