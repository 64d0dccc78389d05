# SPDX-License-Identifier: LGPL-3.0-or-later
"""getfacl(1)-style text for POSIX ACL entries, and principal lookups."""

import grp
import pwd

from ._exceptions import PrincipalResolutionError
from ._types import POSIXAce, POSIXPerm, POSIXTag


_POSIX_TAG_PREFIX = {
    POSIXTag.USER_OBJ:  'user',
    POSIXTag.USER:      'user',
    POSIXTag.GROUP_OBJ: 'group',
    POSIXTag.GROUP:     'group',
    POSIXTag.MASK:      'mask',
    POSIXTag.OTHER:     'other',
}

_POSIX_PERM_CHARS = (
    (POSIXPerm.READ,    'r'),
    (POSIXPerm.WRITE,   'w'),
    (POSIXPerm.EXECUTE, 'x'),
)

_POSIX_PERM_FROM_CHAR = {c: bit for bit, c in _POSIX_PERM_CHARS}


# ── name resolution ───────────────────────────────────────────────────────────

def name_of_uid(uid, numeric=False):
    if not numeric:
        try:
            return pwd.getpwuid(uid).pw_name
        except KeyError:
            pass
    return str(uid)


def name_of_gid(gid, numeric=False):
    if not numeric:
        try:
            return grp.getgrgid(gid).gr_name
        except KeyError:
            pass
    return str(gid)


def resolve_uid(s):
    """Return the uid for a user name or numeric string."""
    try:
        return int(s)
    except ValueError:
        pass
    try:
        return pwd.getpwnam(s).pw_uid
    except KeyError:
        raise PrincipalResolutionError(f'unknown user: {s!r}') from None


def resolve_gid(s):
    """Return the gid for a group name or numeric string."""
    try:
        return int(s)
    except ValueError:
        pass
    try:
        return grp.getgrnam(s).gr_gid
    except KeyError:
        raise PrincipalResolutionError(f'unknown group: {s!r}') from None


def primary_gid_of_user(s):
    """Return the primary gid of a user name or numeric uid string."""
    uid = resolve_uid(s)
    try:
        return pwd.getpwuid(uid).pw_gid
    except (KeyError, OverflowError):
        raise PrincipalResolutionError(f'unknown user: {s!r}') from None


# ── permissions ───────────────────────────────────────────────────────────────

def perm_str(perms):
    return ''.join(c if perms & bit else '-' for bit, c in _POSIX_PERM_CHARS)


def parse_perms(s):
    perms = POSIXPerm(0)
    for ch in s:
        if ch == '-':
            continue
        if ch not in _POSIX_PERM_FROM_CHAR:
            raise ValueError(f'invalid POSIX perm char: {ch!r}')
        perms |= _POSIX_PERM_FROM_CHAR[ch]
    return perms


# ── entries ───────────────────────────────────────────────────────────────────

def qualifier(ace, numeric=False):
    if ace.tag == POSIXTag.USER:
        return name_of_uid(ace.id, numeric)
    if ace.tag == POSIXTag.GROUP:
        return name_of_gid(ace.id, numeric)
    return ''


def format_ace(ace, numeric=False):
    """Render as tag:qualifier:perms, e.g. user:alice:rw- or mask::r-x."""
    tag = _POSIX_TAG_PREFIX[ace.tag]
    return f'{tag}:{qualifier(ace, numeric)}:{perm_str(ace.perms)}'


def parse_ace(s):
    """Parse tag:qualifier:perms into a POSIXAce.

    Returns (ace, default) where default is True for a 'default:' prefix.
    """
    default = s.startswith('default:')
    if default:
        s = s[8:]
    parts = s.split(':')
    if len(parts) != 3:
        raise ValueError(f'invalid POSIX ACE: {s!r}')
    tag_str, qual_str, perms_str = parts
    perms = parse_perms(perms_str)
    if tag_str in ('user', 'u'):
        if not qual_str:
            return POSIXAce(POSIXTag.USER_OBJ, perms), default
        return POSIXAce(POSIXTag.USER, perms, resolve_uid(qual_str)), default
    if tag_str in ('group', 'g'):
        if not qual_str:
            return POSIXAce(POSIXTag.GROUP_OBJ, perms), default
        return POSIXAce(POSIXTag.GROUP, perms, resolve_gid(qual_str)), default
    if tag_str in ('mask', 'm'):
        return POSIXAce(POSIXTag.MASK, perms), default
    if tag_str in ('other', 'o'):
        return POSIXAce(POSIXTag.OTHER, perms), default
    raise ValueError(f'invalid POSIX tag: {tag_str!r}')


def parse_remove_spec(s):
    """Parse user:NAME or group:NAME[:...] into (tag, id, default)."""
    default = s.startswith('default:')
    if default:
        s = s[8:]
    parts = s.split(':')
    tag_str = parts[0]
    qual_str = parts[1] if len(parts) > 1 else ''
    if not qual_str:
        raise ValueError(f'only named entries can be removed: {s!r}')
    if tag_str in ('user', 'u'):
        return POSIXTag.USER, resolve_uid(qual_str), default
    if tag_str in ('group', 'g'):
        return POSIXTag.GROUP, resolve_gid(qual_str), default
    raise ValueError(f'invalid POSIX remove spec: {s!r}')


def split_entries(text):
    result = []
    for line in text.replace(',', '\n').splitlines():
        line = line.strip()
        if not line or line.startswith('#'):
            continue
        result.append(line)
    return result


# ── whole ACLs ────────────────────────────────────────────────────────────────

def format_acl_text(path, uid, gid, access, default, numeric=False,
                    quiet=False):
    lines = []
    if not quiet:
        lines.append(f'# file: {path}')
        lines.append(f'# owner: {name_of_uid(uid, numeric)}')
        lines.append(f'# group: {name_of_gid(gid, numeric)}')
    for ace in access:
        lines.append(format_ace(ace, numeric))
    for ace in default:
        lines.append('default:' + format_ace(ace, numeric))
    return '\n'.join(lines)


def ace_to_dict(ace, numeric=False, default=False):
    qual = qualifier(ace, numeric)
    return {
        'tag': ace.tag.name,
        'id': None if ace.tag not in (POSIXTag.USER, POSIXTag.GROUP) else ace.id,
        'qualifier': qual if qual else None,
        'perms': [bit.name for bit, _ in _POSIX_PERM_CHARS if ace.perms & bit],
        'default': default,
    }


def acl_to_dict(path, uid, gid, access, default, numeric=False):
    return {
        'path': path,
        'uid': uid,
        'gid': gid,
        'owner': name_of_uid(uid, numeric),
        'group': name_of_gid(gid, numeric),
        'trivial': access.trivial and not default,
        'aces': ([ace_to_dict(ace, numeric) for ace in access] +
                 [ace_to_dict(ace, numeric, True) for ace in default]),
    }
