# SPDX-License-Identifier: LGPL-3.0-or-later
"""
Binary codec for the system.posix_acl_access / system.posix_acl_default
xattr value.

Layout (little-endian, as written by the kernel on every architecture):

    u32 version            always 2
    repeated 8-byte entries:
        u16 tag            POSIXTag
        u16 perm           POSIXPerm
        u32 id             uid/gid, or UNDEFINED_ID for special entries
"""

import struct

from ._exceptions import FormatError
from ._types import POSIXACL, POSIXAce, POSIXPerm, POSIXTag


_POSIX_HDR = struct.Struct('<I')        # version
_POSIX_ACE = struct.Struct('<HHI')      # tag, perm, id

HEADER_SIZE = _POSIX_HDR.size
ENTRY_SIZE = _POSIX_ACE.size


def decode(data):
    """Decode xattr bytes into a POSIXACL.

    None or b'' (attribute absent) yields an empty POSIXACL.
    """
    if not data:
        return POSIXACL()
    data = bytes(data)
    if len(data) < HEADER_SIZE:
        raise FormatError(f'POSIX ACL xattr too short: {len(data)} bytes')
    version, = _POSIX_HDR.unpack_from(data, 0)
    if version != POSIXACL.version:
        raise FormatError(f'unsupported POSIX ACL xattr version: {version}')

    aces = []
    offset = HEADER_SIZE
    while len(data) - offset >= ENTRY_SIZE:
        tag, perm, id_ = _POSIX_ACE.unpack_from(data, offset)
        offset += ENTRY_SIZE
        try:
            tag = POSIXTag(tag)
        except ValueError:
            raise FormatError(f'unknown POSIX ACL tag: {tag:#x}') from None
        if perm > POSIXPerm.ALL:
            raise FormatError(f'invalid POSIX ACL perm: {perm:#x}')
        aces.append(POSIXAce(tag, POSIXPerm(perm), id_))

    if offset != len(data):
        raise FormatError(f'truncated POSIX ACL entry: {len(data) - offset} '
                          f'trailing bytes')
    return POSIXACL.from_aces(aces)


def encode(acl):
    """Encode a POSIXACL in its current entry order."""
    buf = bytearray(HEADER_SIZE + ENTRY_SIZE * len(acl))
    _POSIX_HDR.pack_into(buf, 0, acl.version)
    for i, ace in enumerate(acl):
        _POSIX_ACE.pack_into(buf, HEADER_SIZE + i * ENTRY_SIZE,
                             int(ace.tag), int(ace.perms), ace.id)
    return bytes(buf)
