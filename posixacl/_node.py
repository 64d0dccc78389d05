# SPDX-License-Identifier: LGPL-3.0-or-later
"""
Read, mutate and write POSIX ACL xattrs on a filesystem node.

Each call reads the xattr fresh, computes the new list and writes it back
immediately.  Nothing is cached between calls and there is no locking: two
processes mutating the same node race and the last writer wins.
"""

import dataclasses
import errno
import logging
import os
import stat

from ._codec import decode, encode
from ._exceptions import AttributeWriteError
from ._mode import (
    derive_implicit_acl, minimal_acl_from_mode, mode_with_class_perms,
)
from ._mutate import (
    ensure_mask, recalc_mask, remove_principal, set_base_perms,
    upsert_principal,
)
from ._text import resolve_gid, resolve_uid
from ._types import (
    ACLType, POSIXACL, POSIXAce, POSIXPerm, POSIXTag, PermClass,
)


logger = logging.getLogger(__name__)

_CLASS_OF_TAG = {
    POSIXTag.USER_OBJ: PermClass.OWNER,
    POSIXTag.GROUP_OBJ: PermClass.GROUP,
    POSIXTag.OTHER: PermClass.OTHER,
}


@dataclasses.dataclass(slots=True)
class FileNode:
    """Path plus the stat fields the ACL code needs.

    mode holds the permission bits only (S_IMODE).  It is refreshed after
    every write that can change it.
    """
    path: str
    mode: int
    uid: int
    gid: int
    isdir: bool = False

    @classmethod
    def from_path(cls, path):
        path = os.fspath(path)
        st = os.stat(path)
        return cls(path, stat.S_IMODE(st.st_mode), st.st_uid, st.st_gid,
                   stat.S_ISDIR(st.st_mode))

    def refresh(self):
        st = os.stat(self.path)
        self.mode = stat.S_IMODE(st.st_mode)
        self.uid = st.st_uid
        self.gid = st.st_gid
        self.isdir = stat.S_ISDIR(st.st_mode)


# ── read / write ──────────────────────────────────────────────────────────────

def read_acl(node, acl_type=ACLType.ACCESS):
    """Return the stored ACL of acl_type; empty when the xattr is absent."""
    try:
        data = os.getxattr(node.path, acl_type.xattr_name)
    except OSError as e:
        if e.errno != errno.ENODATA:
            raise
        logger.debug('%s: no %s xattr', node.path, acl_type.xattr_name)
        return POSIXACL()
    return decode(data)


def flush_acl(node, acl, acl_type=ACLType.ACCESS):
    """Write acl to the node's xattr; an empty acl removes the xattr.

    Writing the access class changes how the kernel reports the group mode
    bits, so node is re-stated afterwards.
    """
    name = acl_type.xattr_name
    try:
        if acl:
            os.setxattr(node.path, name, encode(acl))
        else:
            try:
                os.removexattr(node.path, name)
            except OSError as e:
                if e.errno != errno.ENODATA:
                    raise
    except OSError as e:
        call = 'setxattr' if acl else 'removexattr'
        raise AttributeWriteError(e.errno, f'{call} {name}: {e.strerror}',
                                  node.path) from e

    logger.debug('%s: wrote %s (%d entries)', node.path, name, len(acl))
    if acl_type is ACLType.ACCESS:
        node.refresh()


def remove_acl(node, acl_type=ACLType.ACCESS):
    """Strip an ACL class.

    For the access class the USER_OBJ, GROUP_OBJ and OTHER entries are
    written back alone; the kernel folds them into the mode bits and drops
    the xattr, so the group field returns to GROUP_OBJ rather than the mask.
    """
    if acl_type is ACLType.ACCESS:
        acl = read_acl(node, acl_type)
        if acl:
            base = POSIXACL.from_aces(a for a in acl if a.tag in _CLASS_OF_TAG)
            flush_acl(node, base, acl_type)
            return
    flush_acl(node, POSIXACL(), acl_type)


def get_effective_acl(node):
    """Stored access ACL, or the 3-entry ACL implied by the mode bits."""
    acl = read_acl(node, ACLType.ACCESS)
    if acl:
        return acl
    return minimal_acl_from_mode(node.mode)


def _seed_acl(node, acl_type):
    """Starting list for an ACL class that has no stored xattr.

    The access class comes from the mode bits.  The default class copies
    USER_OBJ, GROUP_OBJ and OTHER from the effective access ACL, since once
    an access ACL exists the mode's group field holds its mask.
    """
    if acl_type is ACLType.ACCESS:
        return derive_implicit_acl(node.mode)
    access = get_effective_acl(node)
    group = access.get(POSIXTag.GROUP_OBJ).perms
    return POSIXACL.from_aces([
        access.get(POSIXTag.USER_OBJ),
        POSIXAce(POSIXTag.GROUP_OBJ, group),
        POSIXAce(POSIXTag.MASK, group),
        access.get(POSIXTag.OTHER),
    ])


# ── mutations ─────────────────────────────────────────────────────────────────

def set_class_permissions(node, perm_class, perms):
    """chmod the owner, group or other field of node to perms.

    Named USER/GROUP entries are left alone.  The kernel may rewrite the
    stored ACL (the mask follows the group field), so the access ACL is
    re-read and returned.
    """
    node.refresh()
    new_mode = mode_with_class_perms(node.mode, perm_class, POSIXPerm(perms))
    os.chmod(node.path, new_mode)
    logger.debug('%s: chmod %04o -> %04o', node.path, node.mode, new_mode)
    node.refresh()
    return read_acl(node, ACLType.ACCESS)


def modify_principal(node, tag, id, perms, acl_type=ACLType.ACCESS,
                     recalc=True):
    """Insert or replace a named USER/GROUP entry and write the result.

    A missing ACL is seeded first (see _seed_acl).  With recalc the mask
    becomes the union of GROUP_OBJ and all named entries.
    """
    node.refresh()
    acl = read_acl(node, acl_type)
    if not acl:
        acl = _seed_acl(node, acl_type)
    acl = upsert_principal(acl, tag, id, perms)
    acl = recalc_mask(acl) if recalc else ensure_mask(acl)
    flush_acl(node, acl, acl_type)
    return acl


def modify_user(node, user, perms, acl_type=ACLType.ACCESS, recalc=True):
    """Grant perms to a user given by name, numeric string or uid."""
    uid = user if isinstance(user, int) else resolve_uid(user)
    return modify_principal(node, POSIXTag.USER, uid, perms, acl_type, recalc)


def modify_group(node, group, perms, acl_type=ACLType.ACCESS, recalc=True):
    """Grant perms to a group given by name, numeric string or gid."""
    gid = group if isinstance(group, int) else resolve_gid(group)
    return modify_principal(node, POSIXTag.GROUP, gid, perms, acl_type, recalc)


def modify_base_entry(node, tag, perms, acl_type=ACLType.ACCESS):
    """Set the USER_OBJ, GROUP_OBJ, MASK or OTHER entry.

    Without a stored access ACL the owner/group/other entries live in the
    mode bits, so those go through set_class_permissions.
    """
    tag = POSIXTag(tag)
    node.refresh()
    acl = read_acl(node, acl_type)
    if not acl and acl_type is ACLType.ACCESS and tag in _CLASS_OF_TAG:
        return set_class_permissions(node, _CLASS_OF_TAG[tag], perms)
    if not acl:
        acl = _seed_acl(node, acl_type)
    acl = set_base_perms(acl, tag, perms)
    flush_acl(node, acl, acl_type)
    return acl


def remove_named_entry(node, tag, id, acl_type=ACLType.ACCESS, recalc=True):
    """Remove a named USER/GROUP entry; a no-op when it is absent."""
    node.refresh()
    acl = read_acl(node, acl_type)
    new_acl = remove_principal(acl, tag, id)
    if new_acl is acl:
        return acl
    if recalc:
        new_acl = recalc_mask(new_acl)
    flush_acl(node, new_acl, acl_type)
    return new_acl
