# SPDX-License-Identifier: LGPL-3.0-or-later
"""
Tests for mode-bit derivation and the pure list mutators.

No filesystem access is required.
"""

import random

import pytest
import posixacl as pa


_R = pa.POSIXPerm.READ
_RW = pa.POSIXPerm.READ | pa.POSIXPerm.WRITE
_RX = pa.POSIXPerm.READ | pa.POSIXPerm.EXECUTE
_NONE = pa.POSIXPerm(0)


def _tags(acl):
    return [a.tag for a in acl]


def _assert_sorted_unique(acl):
    keys = [(int(a.tag), a.id) for a in acl]
    assert keys == sorted(keys)
    assert len(set(keys)) == len(keys)


# ── mode_to_perm / class helpers ─────────────────────────────────────────────

def test_mode_to_perm_all_values():
    for bits in range(8):
        assert int(pa.mode_to_perm(bits)) == bits


def test_class_perms():
    assert pa.class_perms(0o754, pa.PermClass.OWNER) == pa.POSIXPerm.ALL
    assert pa.class_perms(0o754, pa.PermClass.GROUP) == _RX
    assert pa.class_perms(0o754, pa.PermClass.OTHER) == _R


def test_mode_with_class_perms_other():
    assert pa.mode_with_class_perms(0o640, pa.PermClass.OTHER, _R) == 0o644


def test_mode_with_class_perms_only_touches_field():
    mode = 0o4755
    new = pa.mode_with_class_perms(mode, pa.PermClass.GROUP, _NONE)
    assert new == 0o4705


# ── derive_implicit_acl ──────────────────────────────────────────────────────

def test_derive_640():
    acl = pa.derive_implicit_acl(0o640)
    assert _tags(acl) == [pa.POSIXTag.USER_OBJ, pa.POSIXTag.GROUP_OBJ,
                          pa.POSIXTag.MASK, pa.POSIXTag.OTHER]
    assert [a.perms for a in acl] == [_RW, _R, _R, _NONE]
    assert all(a.id == pa.UNDEFINED_ID for a in acl)


def test_derive_ignores_file_type_bits():
    acl = pa.derive_implicit_acl(0o100755)
    assert [int(a.perms) for a in acl] == [7, 5, 5, 5]


def test_minimal_acl_from_mode():
    acl = pa.minimal_acl_from_mode(0o751)
    assert _tags(acl) == [pa.POSIXTag.USER_OBJ, pa.POSIXTag.GROUP_OBJ,
                          pa.POSIXTag.OTHER]
    assert [int(a.perms) for a in acl] == [7, 5, 1]
    assert acl.trivial


# ── mode_from_acl ────────────────────────────────────────────────────────────

def test_mode_from_acl_uses_mask_for_group():
    acl = pa.upsert_principal(pa.derive_implicit_acl(0o644), pa.POSIXTag.USER,
                              1001, _RW)
    acl = pa.recalc_mask(acl)
    assert pa.mode_from_acl(acl, 0o644) == 0o664


def test_mode_from_acl_without_mask_uses_group_obj():
    acl = pa.minimal_acl_from_mode(0o750)
    assert pa.mode_from_acl(acl, 0) == 0o750


def test_mode_from_acl_empty_keeps_mode():
    assert pa.mode_from_acl(pa.POSIXACL(), 0o1777) == 0o1777


# ── find_ace ─────────────────────────────────────────────────────────────────

def test_find_ace_present_and_absent():
    acl = pa.upsert_principal(pa.derive_implicit_acl(0o640), pa.POSIXTag.USER,
                              1001, _RW)
    assert pa.find_ace(acl, pa.POSIXTag.USER, 1001) == 1
    assert pa.find_ace(acl, pa.POSIXTag.MASK) == 3
    assert pa.find_ace(acl, pa.POSIXTag.USER, 1002) is None
    assert pa.find_ace(pa.POSIXACL(), pa.POSIXTag.OTHER) is None


# ── upsert_principal ─────────────────────────────────────────────────────────

def test_upsert_inserts_user_after_user_obj():
    base = pa.derive_implicit_acl(0o640)
    acl = pa.upsert_principal(base, pa.POSIXTag.USER, 1001, _RW)
    assert len(acl) == 5
    assert _tags(acl) == [pa.POSIXTag.USER_OBJ, pa.POSIXTag.USER,
                          pa.POSIXTag.GROUP_OBJ, pa.POSIXTag.MASK,
                          pa.POSIXTag.OTHER]
    assert acl[1] == pa.POSIXAce(pa.POSIXTag.USER, _RW, 1001)
    assert [a for a in acl if a.tag != pa.POSIXTag.USER] == list(base)
    _assert_sorted_unique(acl)


def test_upsert_seeds_empty_acl_from_mode():
    acl = pa.upsert_principal(pa.POSIXACL(), pa.POSIXTag.USER, 1001, _RW,
                              mode=0o640)
    assert acl == pa.upsert_principal(pa.derive_implicit_acl(0o640),
                                      pa.POSIXTag.USER, 1001, _RW)


def test_upsert_empty_without_mode_raises():
    with pytest.raises(ValueError, match='mode is required'):
        pa.upsert_principal(pa.POSIXACL(), pa.POSIXTag.USER, 1001, _RW)


def test_upsert_ignores_mode_when_acl_present():
    base = pa.derive_implicit_acl(0o640)
    acl = pa.upsert_principal(base, pa.POSIXTag.USER, 1001, _RW, mode=0o777)
    assert acl.get(pa.POSIXTag.USER_OBJ).perms == _RW


def test_upsert_is_idempotent():
    base = pa.derive_implicit_acl(0o640)
    once = pa.upsert_principal(base, pa.POSIXTag.USER, 1001, _RW)
    twice = pa.upsert_principal(once, pa.POSIXTag.USER, 1001, _RW)
    assert twice == once
    assert len(twice) == len(once)


def test_upsert_replaces_in_place():
    acl = pa.upsert_principal(pa.derive_implicit_acl(0o640),
                              pa.POSIXTag.USER, 1001, _RW)
    acl = pa.upsert_principal(acl, pa.POSIXTag.USER, 1001, _R)
    assert len(acl) == 5
    assert acl[1] == pa.POSIXAce(pa.POSIXTag.USER, _R, 1001)


def test_upsert_users_kept_in_id_order():
    acl = pa.derive_implicit_acl(0o640)
    for uid in (1003, 1001, 1002):
        acl = pa.upsert_principal(acl, pa.POSIXTag.USER, uid, _R)
    assert [a.id for a in acl if a.tag == pa.POSIXTag.USER] == [1001, 1002, 1003]
    _assert_sorted_unique(acl)


def test_upsert_group_goes_between_group_obj_and_mask():
    acl = pa.upsert_principal(pa.derive_implicit_acl(0o640),
                              pa.POSIXTag.GROUP, 100, _RX)
    assert _tags(acl) == [pa.POSIXTag.USER_OBJ, pa.POSIXTag.GROUP_OBJ,
                          pa.POSIXTag.GROUP, pa.POSIXTag.MASK,
                          pa.POSIXTag.OTHER]
    assert acl[2].tag == pa.POSIXTag.GROUP
    assert acl[2].id == 100


def test_upsert_user_and_group_same_id_are_distinct():
    acl = pa.derive_implicit_acl(0o640)
    acl = pa.upsert_principal(acl, pa.POSIXTag.USER, 1001, _RW)
    acl = pa.upsert_principal(acl, pa.POSIXTag.GROUP, 1001, _R)
    assert acl.get(pa.POSIXTag.USER, 1001).perms == _RW
    assert acl.get(pa.POSIXTag.GROUP, 1001).perms == _R


def test_upsert_into_list_without_mask():
    acl = pa.upsert_principal(pa.minimal_acl_from_mode(0o750),
                              pa.POSIXTag.GROUP, 100, _R)
    assert _tags(acl)[-2:] == [pa.POSIXTag.GROUP, pa.POSIXTag.OTHER]


def test_upsert_rejects_special_tag():
    with pytest.raises(ValueError, match='not a named'):
        pa.upsert_principal(pa.derive_implicit_acl(0o640),
                            pa.POSIXTag.MASK, pa.UNDEFINED_ID, _R)


def test_upsert_sequence_keeps_order_invariant():
    rng = random.Random(1234)
    acl = pa.derive_implicit_acl(0o755)
    for _ in range(200):
        tag = rng.choice([pa.POSIXTag.USER, pa.POSIXTag.GROUP])
        acl = pa.upsert_principal(acl, tag, rng.randrange(1000, 1020),
                                  pa.POSIXPerm(rng.randrange(8)))
        _assert_sorted_unique(acl)
    assert len(acl) <= 4 + 40


# ── set_base_perms ───────────────────────────────────────────────────────────

def test_set_base_perms_replaces_entry():
    acl = pa.set_base_perms(pa.derive_implicit_acl(0o640), pa.POSIXTag.OTHER,
                            _R)
    assert acl.get(pa.POSIXTag.OTHER).perms == _R
    assert len(acl) == 4


def test_set_base_perms_inserts_missing_mask():
    acl = pa.set_base_perms(pa.minimal_acl_from_mode(0o750), pa.POSIXTag.MASK,
                            _RX)
    assert _tags(acl) == [pa.POSIXTag.USER_OBJ, pa.POSIXTag.GROUP_OBJ,
                          pa.POSIXTag.MASK, pa.POSIXTag.OTHER]


def test_set_base_perms_rejects_named_tag():
    with pytest.raises(ValueError, match='not a USER_OBJ'):
        pa.set_base_perms(pa.derive_implicit_acl(0o640), pa.POSIXTag.USER, _R)


# ── remove_principal ─────────────────────────────────────────────────────────

def test_remove_principal():
    base = pa.derive_implicit_acl(0o640)
    acl = pa.upsert_principal(base, pa.POSIXTag.USER, 1001, _RW)
    assert pa.remove_principal(acl, pa.POSIXTag.USER, 1001) == base


def test_remove_principal_absent_returns_same_list():
    base = pa.derive_implicit_acl(0o640)
    assert pa.remove_principal(base, pa.POSIXTag.GROUP, 5) is base


# ── recalc_mask / ensure_mask ────────────────────────────────────────────────

def test_recalc_mask_union_of_named_and_group_obj():
    acl = pa.derive_implicit_acl(0o640)
    acl = pa.upsert_principal(acl, pa.POSIXTag.USER, 1001, pa.POSIXPerm.WRITE)
    acl = pa.upsert_principal(acl, pa.POSIXTag.GROUP, 100, pa.POSIXPerm.EXECUTE)
    acl = pa.recalc_mask(acl)
    assert acl.get(pa.POSIXTag.MASK).perms == pa.POSIXPerm.ALL


def test_recalc_mask_leaves_minimal_acl_alone():
    acl = pa.minimal_acl_from_mode(0o640)
    assert pa.recalc_mask(acl) is acl


def test_recalc_mask_without_named_entries_uses_group_obj():
    acl = pa.set_base_perms(pa.derive_implicit_acl(0o640), pa.POSIXTag.MASK,
                            pa.POSIXPerm.ALL)
    assert pa.recalc_mask(acl).get(pa.POSIXTag.MASK).perms == _R


def test_recalc_mask_inserts_mask():
    acl = pa.upsert_principal(pa.minimal_acl_from_mode(0o750),
                              pa.POSIXTag.USER, 1001, _RW)
    acl = pa.recalc_mask(acl)
    assert acl.get(pa.POSIXTag.MASK).perms == pa.POSIXPerm.ALL
    _assert_sorted_unique(acl)


def test_ensure_mask_seeds_from_group_obj():
    acl = pa.upsert_principal(pa.minimal_acl_from_mode(0o750),
                              pa.POSIXTag.USER, 1001, _RW)
    acl = pa.ensure_mask(acl)
    assert acl.get(pa.POSIXTag.MASK).perms == _RX


def test_ensure_mask_keeps_existing_mask():
    acl = pa.upsert_principal(pa.derive_implicit_acl(0o640),
                              pa.POSIXTag.USER, 1001, pa.POSIXPerm.ALL)
    assert pa.ensure_mask(acl) is acl
