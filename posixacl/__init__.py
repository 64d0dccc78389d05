# SPDX-License-Identifier: LGPL-3.0-or-later
"""
POSIX1E ACL support on top of the system.posix_acl_* extended attributes.

Typical use:

    import posixacl as pa

    node = pa.FileNode.from_path('/run/app.sock')
    pa.modify_user(node, 'nginx', pa.POSIXPerm.READ | pa.POSIXPerm.WRITE)
"""

from ._codec import ENTRY_SIZE, HEADER_SIZE, decode, encode
from ._exceptions import (
    AttributeWriteError, FormatError, InvariantViolation, POSIXACLError,
    PrincipalResolutionError,
)
from ._mode import (
    class_perms, derive_implicit_acl, minimal_acl_from_mode, mode_from_acl,
    mode_to_perm, mode_with_class_perms,
)
from ._mutate import (
    ensure_mask, find_ace, recalc_mask, remove_principal, set_base_perms,
    upsert_principal,
)
from ._node import (
    FileNode, flush_acl, get_effective_acl, modify_base_entry, modify_group,
    modify_principal, modify_user, read_acl, remove_acl, remove_named_entry,
    set_class_permissions,
)
from ._socket import (
    AppEnv, PrincipalKind, SocketConfig, configure_socket,
    grant_principal_access, load_config,
)
from ._text import (
    acl_to_dict, format_ace, format_acl_text, name_of_gid, name_of_uid,
    parse_ace, parse_perms, parse_remove_spec, perm_str, resolve_gid,
    resolve_uid, split_entries,
)
from ._types import (
    UNDEFINED_ID, ACLType, PermClass, POSIXACL, POSIXAce, POSIXPerm, POSIXTag,
)

__all__ = [
    'ACLType', 'AppEnv', 'AttributeWriteError', 'ENTRY_SIZE', 'FileNode',
    'FormatError', 'HEADER_SIZE', 'InvariantViolation', 'POSIXACL',
    'POSIXACLError', 'POSIXAce', 'POSIXPerm', 'POSIXTag', 'PermClass',
    'PrincipalKind', 'PrincipalResolutionError', 'SocketConfig',
    'UNDEFINED_ID', 'acl_to_dict', 'class_perms', 'configure_socket',
    'decode', 'derive_implicit_acl', 'encode', 'ensure_mask', 'find_ace',
    'flush_acl', 'format_ace', 'format_acl_text', 'get_effective_acl',
    'grant_principal_access', 'load_config', 'minimal_acl_from_mode',
    'mode_from_acl', 'mode_to_perm', 'mode_with_class_perms',
    'modify_base_entry', 'modify_group', 'modify_principal', 'modify_user',
    'name_of_gid', 'name_of_uid', 'parse_ace', 'parse_perms',
    'parse_remove_spec', 'perm_str',
    'read_acl', 'recalc_mask', 'remove_acl', 'remove_named_entry',
    'remove_principal', 'resolve_gid', 'resolve_uid', 'set_base_perms',
    'set_class_permissions', 'split_entries', 'upsert_principal',
]
