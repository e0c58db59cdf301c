"""Public package exports."""

from dir_access.access import AccessEvaluator
from dir_access.access_cache import NegativeAccessCache
from dir_access.config import AccessPolicy
from dir_access.config import Settings
from dir_access.directory_access import DirectoryAccess
from dir_access.errors import OperationCancelledError
from dir_access.locks import LockWaitCoordinator
from dir_access.rights import FileSystemRights
from dir_access.rights import GenericRights
from dir_access.traversal import DirectoryWalker

__all__ = [
    "AccessEvaluator",
    "AccessPolicy",
    "DirectoryAccess",
    "DirectoryWalker",
    "FileSystemRights",
    "GenericRights",
    "LockWaitCoordinator",
    "NegativeAccessCache",
    "OperationCancelledError",
    "Settings",
]
