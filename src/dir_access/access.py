"""Access-control evaluation for directories."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterable, Optional

from dir_access.access_cache import NegativeAccessCache
from dir_access.config import AccessPolicy
from dir_access.filesystem import DirectoryBackend, LocalFilesystem, current_identity
from dir_access.models.access_rule import AccessControlType, AccessRule
from dir_access.models.identity import Identity
from dir_access.rights import NO_RIGHTS_SENTINEL, FileSystemRights, covers, normalize_rights


logger = logging.getLogger(__name__)


def rule_applies_local(rule: AccessRule, identity: Identity, rights: int) -> bool:
    """
    Account subjects must be the principal, group subjects one of its groups.
    Generic bits are expanded before the rights comparison.
    """
    subject = rule.subject
    if subject.is_account():
        if subject != identity.principal:
            return False
    elif subject not in identity.require_groups():
        return False
    if rule.rights == NO_RIGHTS_SENTINEL:
        return False
    return covers(normalize_rights(rule.rights), rights)


def rule_applies_server(rule: AccessRule, identity: Identity, rights: int) -> bool:
    """Any subject whose value names one of the identity's groups, raw rights only."""
    if rule.subject.value not in identity.group_values():
        return False
    if rule.rights == NO_RIGHTS_SENTINEL:
        return False
    return covers(rule.rights, rights)


def aggregate_rules(rules: Iterable[AccessRule]) -> bool:
    allow = False
    deny = False
    for rule in rules:
        if rule.access_type == AccessControlType.ALLOW:
            allow = True
        elif rule.access_type == AccessControlType.DENY:
            deny = True
    return allow and not deny


class AccessEvaluator:
    def __init__(
        self,
        backend: DirectoryBackend | None = None,
        *,
        cache: NegativeAccessCache | None = None,
        policy: AccessPolicy | None = None,
        identity: Identity | None = None,
    ) -> None:
        self.backend: DirectoryBackend = backend if backend is not None else LocalFilesystem()
        self.cache: NegativeAccessCache = cache if cache is not None else NegativeAccessCache()
        self.policy: AccessPolicy = policy if policy is not None else AccessPolicy()
        self._identity: Identity | None = identity

    @property
    def identity(self) -> Identity:
        if self._identity is None:
            self._identity = current_identity()
        return self._identity

    def can_access(
        self,
        directory: Path,
        identity: Optional[Identity] = None,
        rights: int = FileSystemRights.MODIFY,
    ) -> bool:
        if directory is None:
            raise ValueError("directory is required.")
        user = identity if identity is not None else self.identity
        user.require_groups()

        if not self.backend.exists(directory):
            raise FileNotFoundError(f"Directory {directory} does not exist.")
        if self.cache.lookup(directory):
            logger.debug("Access to %s denied from cache", directory)
            return False

        rules = self._read_rules(directory)
        if rules is None:
            return False

        local_access = aggregate_rules(rule for rule in rules if rule_applies_local(rule, user, rights))
        if local_access:
            return True
        if self.policy.server_track:
            server_access = aggregate_rules(rule for rule in rules if rule_applies_server(rule, user, rights))
            if server_access:
                return True
        if self.policy.list_fallback and rights == FileSystemRights.LIST_DIRECTORY:
            return self._listing_succeeds(directory)
        return False

    def can_list(self, directory: Path, identity: Optional[Identity] = None) -> bool:
        return self.can_access(directory, identity, FileSystemRights.LIST_DIRECTORY)

    def ensure_directory(self, directory: Path) -> bool:
        """
        Create directory (and missing parents) where the parent grants
        CREATE_DIRECTORIES. Returns False if the directory cannot be created.
        """
        if self.backend.exists(directory):
            return True
        parent = directory.parent
        if parent == directory or not self.ensure_directory(parent):
            return False
        if not self.can_access(parent, rights=FileSystemRights.CREATE_DIRECTORIES):
            return False
        try:
            self.backend.make_directory(directory)
        except OSError as exc:
            logger.debug("Could not create directory %s: %s", directory, exc)
            return False
        return True

    def _read_rules(self, directory: Path) -> list[AccessRule] | None:
        try:
            return self.backend.get_access_rules(directory)
        except PermissionError:
            self.cache.mark_denied(directory)
            logger.debug("No permission to read access rules of %s", directory)
        except FileNotFoundError:
            logger.debug("Directory %s vanished while reading access rules", directory)
        except OSError as exc:
            logger.debug("Error reading access rules of %s: %s", directory, exc)
        return None

    def _listing_succeeds(self, directory: Path) -> bool:
        try:
            self.backend.list_directories(directory)
        except OSError as exc:
            logger.debug("Fallback listing failed for %s: %s", directory, exc)
            return False
        return True
