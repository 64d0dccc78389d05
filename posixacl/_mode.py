# SPDX-License-Identifier: LGPL-3.0-or-later
"""Conversions between inode mode bits and POSIX ACL entries."""

import logging

from ._types import POSIXACL, POSIXAce, POSIXPerm, POSIXTag, PermClass


logger = logging.getLogger(__name__)


def mode_to_perm(bits):
    """Map a 3-bit rwx field (already shifted down) to POSIXPerm."""
    p = POSIXPerm(0)
    if bits & 4:
        p |= POSIXPerm.READ
    if bits & 2:
        p |= POSIXPerm.WRITE
    if bits & 1:
        p |= POSIXPerm.EXECUTE
    return p


def class_perms(mode, perm_class):
    return mode_to_perm((mode >> perm_class.shift) & 7)


def mode_with_class_perms(mode, perm_class, perms):
    """Return mode with the perm_class rwx field replaced by perms."""
    shift = perm_class.shift
    return (mode & ~(0o7 << shift)) | ((int(perms) & 0o7) << shift)


def derive_implicit_acl(mode):
    """Seed ACL implied by mode bits alone.

    USER_OBJ, GROUP_OBJ and OTHER mirror the owner, group and other
    fields.  MASK starts equal to the group field, which is what the kernel
    reports for an ACL that grants nothing beyond the mode.
    """
    group = class_perms(mode, PermClass.GROUP)
    acl = POSIXACL.from_aces([
        POSIXAce(POSIXTag.USER_OBJ, class_perms(mode, PermClass.OWNER)),
        POSIXAce(POSIXTag.GROUP_OBJ, group),
        POSIXAce(POSIXTag.MASK, group),
        POSIXAce(POSIXTag.OTHER, class_perms(mode, PermClass.OTHER)),
    ])
    logger.debug('derived implicit ACL from mode %04o', mode & 0o7777)
    return acl


def minimal_acl_from_mode(mode):
    """Return the 3-entry (no mask) ACL equivalent to mode, for display."""
    return POSIXACL.from_aces([
        POSIXAce(POSIXTag.USER_OBJ, class_perms(mode, PermClass.OWNER)),
        POSIXAce(POSIXTag.GROUP_OBJ, class_perms(mode, PermClass.GROUP)),
        POSIXAce(POSIXTag.OTHER, class_perms(mode, PermClass.OTHER)),
    ])


def mode_from_acl(acl, mode=0):
    """Compute the permission bits the kernel reports for an access ACL.

    The group field follows MASK when one is present, otherwise GROUP_OBJ.
    Bits of mode above the permission fields (setuid, sticky, ...) are kept.
    """
    if not acl:
        return mode
    fields = {
        PermClass.OWNER: POSIXTag.USER_OBJ,
        PermClass.GROUP: (POSIXTag.MASK if acl.get(POSIXTag.MASK)
                          else POSIXTag.GROUP_OBJ),
        PermClass.OTHER: POSIXTag.OTHER,
    }
    for perm_class, tag in fields.items():
        ace = acl.get(tag)
        if ace is not None:
            mode = mode_with_class_perms(mode, perm_class, ace.perms)
    return mode
