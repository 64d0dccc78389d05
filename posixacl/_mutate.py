# SPDX-License-Identifier: LGPL-3.0-or-later
"""
Pure list operations on POSIXACL values.

Every function returns a new POSIXACL and keeps entries sorted by (tag, id)
and unique per (tag, id), so the result can be encoded as-is.
"""

from ._mode import derive_implicit_acl
from ._types import (
    NAMED_TAGS, SPECIAL_TAGS, UNDEFINED_ID, POSIXACL, POSIXAce, POSIXPerm,
    POSIXTag,
)


def _scan(aces, tag, id):
    """Return (found, index) for (tag, id) in sorted aces.

    When not found, index is the insertion point that keeps sort order.
    """
    key = (int(tag), id)
    for i, ace in enumerate(aces):
        if ace.sort_key < key:
            continue
        return ace.sort_key == key, i
    return False, len(aces)


def find_ace(acl, tag, id=UNDEFINED_ID):
    """Index of the (tag, id) entry, or None when absent."""
    found, idx = _scan(acl.aces, tag, id)
    return idx if found else None


def upsert_principal(acl, tag, id, perms, mode=None):
    """Insert or replace the named USER/GROUP entry for id.

    An empty acl is first seeded with the implicit ACL derived from mode.
    The remaining entries are left untouched; the mask is not recalculated
    (see recalc_mask).
    """
    tag = POSIXTag(tag)
    if tag not in NAMED_TAGS:
        raise ValueError(f'{tag.name} is not a named USER/GROUP tag')
    if not acl:
        if mode is None:
            raise ValueError('mode is required to seed an empty ACL')
        acl = derive_implicit_acl(mode)

    new_ace = POSIXAce(tag, POSIXPerm(perms), id)
    aces = list(acl.aces)
    found, idx = _scan(aces, tag, id)
    if found:
        aces[idx] = new_ace
    else:
        aces.insert(idx, new_ace)
    return POSIXACL.from_aces(aces)


def set_base_perms(acl, tag, perms):
    """Replace or add the USER_OBJ, GROUP_OBJ, MASK or OTHER entry."""
    tag = POSIXTag(tag)
    if tag not in SPECIAL_TAGS:
        raise ValueError(f'{tag.name} is not a USER_OBJ/GROUP_OBJ/MASK/OTHER tag')
    aces = list(acl.aces)
    found, idx = _scan(aces, tag, UNDEFINED_ID)
    new_ace = POSIXAce(tag, POSIXPerm(perms))
    if found:
        aces[idx] = new_ace
    else:
        aces.insert(idx, new_ace)
    return POSIXACL.from_aces(aces)


def remove_principal(acl, tag, id):
    """Drop the named USER/GROUP entry for id if present."""
    tag = POSIXTag(tag)
    if tag not in NAMED_TAGS:
        raise ValueError(f'{tag.name} is not a named USER/GROUP tag')
    idx = find_ace(acl, tag, id)
    if idx is None:
        return acl
    aces = list(acl.aces)
    del aces[idx]
    return POSIXACL.from_aces(aces)


def recalc_mask(acl):
    """Set MASK to the union of GROUP_OBJ and every named entry.

    Mirrors acl_calc_mask(3): a list with neither named entries nor a mask
    is returned unchanged; named entries without a mask get one inserted.
    """
    has_named = any(a.tag in NAMED_TAGS for a in acl)
    if not has_named and acl.get(POSIXTag.MASK) is None:
        return acl
    mask_perm = POSIXPerm(0)
    for a in acl:
        if a.tag in NAMED_TAGS or a.tag == POSIXTag.GROUP_OBJ:
            mask_perm |= a.perms
    return set_base_perms(acl, POSIXTag.MASK, mask_perm)


def ensure_mask(acl):
    """Add a MASK seeded from GROUP_OBJ when named entries lack one.

    Existing masks are kept as they are; the kernel rejects named entries
    without a mask.
    """
    has_named = any(a.tag in NAMED_TAGS for a in acl)
    if not has_named or acl.get(POSIXTag.MASK) is not None:
        return acl
    group_obj = acl.get(POSIXTag.GROUP_OBJ)
    group_perm = group_obj.perms if group_obj is not None else POSIXPerm(0)
    return set_base_perms(acl, POSIXTag.MASK, group_perm)
