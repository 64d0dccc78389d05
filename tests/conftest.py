# SPDX-License-Identifier: LGPL-3.0-or-later
"""
Pytest fixtures for posixacl tests.

Pure encoding and list tests need no filesystem.  Live tests use the
posix_dir fixture, a temporary directory whose filesystem has been probed
for POSIX ACL xattr support; the test is skipped when it has none.
"""

import errno
import os
import pwd
import struct

import pytest


_POSIX_HDR = struct.Struct('<I')
_POSIX_ACE = struct.Struct('<HHI')
_SPECIAL = 0xFFFFFFFF


def _probe_acl_bytes():
    # user::rw- user:4242:r-- group::r-- mask::r-- other::r--
    entries = [(0x01, 6, _SPECIAL), (0x02, 4, 4242), (0x04, 4, _SPECIAL),
               (0x10, 4, _SPECIAL), (0x20, 4, _SPECIAL)]
    return _POSIX_HDR.pack(2) + b''.join(_POSIX_ACE.pack(*e) for e in entries)


def _posix_acls_supported(directory):
    probe = os.path.join(directory, '.acl_probe')
    with open(probe, 'w'):
        pass
    try:
        os.setxattr(probe, 'system.posix_acl_access', _probe_acl_bytes())
    except OSError as e:
        if e.errno in (errno.EOPNOTSUPP, errno.ENOTSUP, errno.EPERM,
                       errno.EACCES):
            return False
        raise
    finally:
        os.unlink(probe)
    return True


@pytest.fixture(scope='function')
def posix_dir(tmp_path):
    """
    Temporary directory on a filesystem with POSIX ACL support.
    Yields the path as a str.
    """
    path = str(tmp_path)
    if not _posix_acls_supported(path):
        pytest.skip(f'{path}: POSIX ACL xattrs not supported')
    yield path


@pytest.fixture(scope='function')
def posix_file(posix_dir):
    """Regular file with mode 0644 and no ACL xattr."""
    path = os.path.join(posix_dir, 'testfile')
    fd = os.open(path, os.O_RDWR | os.O_CREAT, 0o644)
    os.close(fd)
    os.chmod(path, 0o644)
    return path


@pytest.fixture(scope='function')
def posix_subdir(posix_dir):
    """Directory with mode 0755 and no ACL xattrs."""
    path = os.path.join(posix_dir, 'testdir')
    os.mkdir(path)
    os.chmod(path, 0o755)
    return path


@pytest.fixture
def fake_principals(monkeypatch):
    """
    Make 'steamsvc' (uid 1001, gid 1001) and group 'svcgrp' (gid 2001)
    resolvable regardless of the host's passwd/group databases.
    """
    import grp

    users = {'steamsvc': 1001}
    groups = {'svcgrp': 2001, 'steamsvc': 1001}
    real_getpwnam = pwd.getpwnam
    real_getpwuid = pwd.getpwuid
    real_getgrnam = grp.getgrnam
    real_getgrgid = grp.getgrgid

    def _pw(name, uid):
        return pwd.struct_passwd((name, 'x', uid, uid, '', '/', '/bin/false'))

    def _gr(name, gid):
        return grp.struct_group((name, 'x', gid, []))

    def getpwnam(name):
        if name in users:
            return _pw(name, users[name])
        return real_getpwnam(name)

    def getpwuid(uid):
        for name, u in users.items():
            if u == uid:
                return _pw(name, uid)
        return real_getpwuid(uid)

    def getgrnam(name):
        if name in groups:
            return _gr(name, groups[name])
        return real_getgrnam(name)

    def getgrgid(gid):
        for name, g in groups.items():
            if g == gid:
                return _gr(name, gid)
        return real_getgrgid(gid)

    monkeypatch.setattr(pwd, 'getpwnam', getpwnam)
    monkeypatch.setattr(pwd, 'getpwuid', getpwuid)
    monkeypatch.setattr(grp, 'getgrnam', getgrnam)
    monkeypatch.setattr(grp, 'getgrgid', getgrgid)
    return users, groups
