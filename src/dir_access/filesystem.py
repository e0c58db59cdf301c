"""Filesystem boundary: directory listing, existence and access rules."""

from __future__ import annotations

import errno
import logging
import os
import struct
from pathlib import Path
from typing import Protocol

from dir_access.models.access_rule import AccessControlType, AccessRule
from dir_access.models.identity import Identity
from dir_access.models.security_id import SecurityId
from dir_access.rights import FileSystemRights


logger = logging.getLogger(__name__)

EVERYONE = SecurityId.group("everyone@")

POSIX_ACL_XATTR = "system.posix_acl_access"

_POSIX_HDR = struct.Struct("<I")  # version
_POSIX_ACE = struct.Struct("<HHI")  # tag, perm, id

_TAG_USER_OBJ = 0x01
_TAG_USER = 0x02
_TAG_GROUP_OBJ = 0x04
_TAG_GROUP = 0x08
_TAG_MASK = 0x10
_TAG_OTHER = 0x20

_PERM_READ = 4
_PERM_WRITE = 2
_PERM_EXECUTE = 1

_NO_ACL_ERRNOS = {errno.ENODATA, errno.ENOTSUP, errno.EOPNOTSUPP}


class DirectoryBackend(Protocol):
    def exists(self, path: Path) -> bool: ...

    def list_directories(self, path: Path) -> list[Path]: ...

    def list_files(self, path: Path) -> list[Path]: ...

    def get_access_rules(self, path: Path) -> list[AccessRule]: ...

    def make_directory(self, path: Path) -> None: ...


def user_sid(uid: int) -> SecurityId:
    return SecurityId.account(f"user:{uid}")


def group_sid(gid: int) -> SecurityId:
    return SecurityId.group(f"group:{gid}")


def current_identity() -> Identity:
    groups = {group_sid(os.getegid()), EVERYONE}
    groups.update(group_sid(gid) for gid in os.getgroups())
    return Identity(principal=user_sid(os.geteuid()), groups=frozenset(groups))


def rights_from_perm_bits(bits: int) -> int:
    rights = 0
    if bits & _PERM_READ:
        rights |= (
            FileSystemRights.READ_DATA
            | FileSystemRights.READ_EXTENDED_ATTRIBUTES
            | FileSystemRights.READ_ATTRIBUTES
            | FileSystemRights.READ_PERMISSIONS
            | FileSystemRights.SYNCHRONIZE
        )
    if bits & _PERM_WRITE:
        rights |= (
            FileSystemRights.WRITE
            | FileSystemRights.DELETE
            | FileSystemRights.DELETE_SUBDIRECTORIES_AND_FILES
        )
    if bits & _PERM_EXECUTE:
        rights |= FileSystemRights.EXECUTE_FILE
    return int(rights)


def parse_posix_acl(data: bytes) -> list[tuple[int, int, int]]:
    """Decode a system.posix_acl_access value into (tag, perm, id) tuples."""
    if len(data) < _POSIX_HDR.size:
        raise ValueError("POSIX ACL xattr is truncated.")
    count = (len(data) - _POSIX_HDR.size) // _POSIX_ACE.size
    return [_POSIX_ACE.unpack_from(data, _POSIX_HDR.size + i * _POSIX_ACE.size) for i in range(count)]


def _allow(subject: SecurityId, bits: int) -> AccessRule | None:
    rights = rights_from_perm_bits(bits)
    if not rights:
        return None
    return AccessRule(subject=subject, rights=rights, access_type=AccessControlType.ALLOW)


class LocalFilesystem:
    """
    DirectoryBackend over the local filesystem.

    Access rules are synthesised from the owner/group/other mode bits, plus
    named user and group entries of a POSIX ACL when one is present. POSIX
    has no deny entries, so every synthesised rule is an allow.
    """

    def exists(self, path: Path) -> bool:
        return path.is_dir()

    def list_directories(self, path: Path) -> list[Path]:
        with os.scandir(path) as entries:
            return [Path(entry.path) for entry in entries if entry.is_dir(follow_symlinks=False)]

    def list_files(self, path: Path) -> list[Path]:
        with os.scandir(path) as entries:
            return [Path(entry.path) for entry in entries if entry.is_file(follow_symlinks=False)]

    def make_directory(self, path: Path) -> None:
        path.mkdir(exist_ok=True)

    def get_access_rules(self, path: Path) -> list[AccessRule]:
        st = os.stat(path)
        mode = st.st_mode
        owner_rule = AccessRule(
            subject=user_sid(st.st_uid),
            rights=int(
                rights_from_perm_bits((mode >> 6) & 7)
                | FileSystemRights.READ_PERMISSIONS
                | FileSystemRights.CHANGE_PERMISSIONS
            ),
        )
        candidates: list[AccessRule | None] = [owner_rule]

        acl_entries = self._read_posix_acl(path)
        if acl_entries is None:
            candidates.append(_allow(group_sid(st.st_gid), (mode >> 3) & 7))
        else:
            mask = next((perm for tag, perm, _ in acl_entries if tag == _TAG_MASK), 7)
            for tag, perm, ident in acl_entries:
                if tag == _TAG_USER:
                    candidates.append(_allow(user_sid(ident), perm & mask))
                elif tag == _TAG_GROUP_OBJ:
                    candidates.append(_allow(group_sid(st.st_gid), perm & mask))
                elif tag == _TAG_GROUP:
                    candidates.append(_allow(group_sid(ident), perm & mask))
        candidates.append(_allow(EVERYONE, mode & 7))
        return [rule for rule in candidates if rule is not None]

    def _read_posix_acl(self, path: Path) -> list[tuple[int, int, int]] | None:
        getxattr = getattr(os, "getxattr", None)
        if getxattr is None:
            return None
        try:
            data = getxattr(path, POSIX_ACL_XATTR)
        except OSError as exc:
            if exc.errno in _NO_ACL_ERRNOS:
                return None
            raise
        try:
            return parse_posix_acl(data)
        except ValueError:
            logger.debug("Ignoring malformed POSIX ACL on %s", path)
            return None
