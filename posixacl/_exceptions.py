# SPDX-License-Identifier: LGPL-3.0-or-later


class POSIXACLError(Exception):
    """Base class for every error raised by posixacl."""


class FormatError(POSIXACLError, ValueError):
    """Stored attribute bytes are not a version 2 POSIX ACL."""


class InvariantViolation(POSIXACLError, ValueError):
    """An entry or list breaks the ordering, uniqueness or id rules."""


class PrincipalResolutionError(POSIXACLError, ValueError):
    """A user or group name could not be resolved to an id."""


class AttributeWriteError(POSIXACLError, OSError):
    """setxattr(2)/removexattr(2) failed.

    errno, strerror and filename are those of the failing call.
    """
