"""Value types for identities, access rules and lock owners."""

from dir_access.models.access_rule import AccessControlType
from dir_access.models.access_rule import AccessRule
from dir_access.models.identity import Identity
from dir_access.models.locking_process import LockingProcess
from dir_access.models.locking_process import LockOwnership
from dir_access.models.security_id import SecurityId

__all__ = [
    "AccessControlType",
    "AccessRule",
    "Identity",
    "LockOwnership",
    "LockingProcess",
    "SecurityId",
]
