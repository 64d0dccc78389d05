# SPDX-License-Identifier: LGPL-3.0-or-later
"""
Grant a peer service access to a freshly bound unix socket.

Two deployment modes:

* ACL mode (staging/production): the server runs as a dedicated service
  user; the peer principal gets a named ACL entry on the socket.
* shared-group mode (development): the server runs as the developer, who
  belongs to the peer's group; the socket's group is changed instead.

The mode comes from SocketConfig, which load_config() builds once from the
environment.  Call this right after bind(), before clients connect.
"""

import dataclasses
import enum
import logging
import os

from dotenv import find_dotenv, load_dotenv

from ._node import FileNode, modify_group, modify_user
from ._text import parse_perms, perm_str, primary_gid_of_user, resolve_gid
from ._types import POSIXPerm


logger = logging.getLogger(__name__)

DEV_SOCKET_PATH = '/tmp/steam-auth.sock'
SERVICE_SOCKET_PATH = '/var/run/steam-auth/steam-auth.sock'


class AppEnv(enum.Enum):
    DEVELOPMENT = 'development'
    STAGING = 'staging'
    PRODUCTION = 'production'


class PrincipalKind(enum.Enum):
    USER = 'user'
    GROUP = 'group'


@dataclasses.dataclass(frozen=True, slots=True)
class SocketConfig:
    app_env: AppEnv
    socket_path: str
    principal: str = 'nginx'
    principal_kind: PrincipalKind = PrincipalKind.USER
    perms: POSIXPerm = POSIXPerm.READ | POSIXPerm.WRITE

    @property
    def shared_group(self):
        return self.app_env is AppEnv.DEVELOPMENT


def _parse_enum(enum_cls, var, raw):
    try:
        return enum_cls(raw.strip().lower())
    except ValueError:
        raise ValueError(f'{var} value {raw!r} is not acceptable') from None


def load_config(environ=None):
    """Build a SocketConfig from environ (default: os.environ plus .env)."""
    if environ is None:
        load_dotenv(find_dotenv(usecwd=True))
        environ = os.environ

    raw_env = environ.get('APP_ENV')
    app_env = (_parse_enum(AppEnv, 'APP_ENV', raw_env) if raw_env
               else AppEnv.DEVELOPMENT)
    default_path = (DEV_SOCKET_PATH if app_env is AppEnv.DEVELOPMENT
                    else SERVICE_SOCKET_PATH)
    kind = _parse_enum(PrincipalKind, 'POSIXACL_SOCKET_PRINCIPAL_KIND',
                       environ.get('POSIXACL_SOCKET_PRINCIPAL_KIND') or 'user')
    return SocketConfig(
        app_env=app_env,
        socket_path=environ.get('POSIXACL_SOCKET_PATH') or default_path,
        principal=environ.get('POSIXACL_SOCKET_PRINCIPAL') or 'nginx',
        principal_kind=kind,
        perms=parse_perms(environ.get('POSIXACL_SOCKET_PERMS') or 'rw-'),
    )


def grant_principal_access(socket_path, kind, name, perms, *,
                           shared_group=False):
    """Give the user or group `name` perms on socket_path.

    In shared-group mode the socket's group is changed to the named group
    (for a user: its primary group) and perms is not applied.  Returns the
    written POSIXACL, or None in shared-group mode.
    """
    kind = PrincipalKind(kind)
    if shared_group:
        if kind is PrincipalKind.GROUP:
            gid = resolve_gid(name)
        else:
            gid = primary_gid_of_user(name)
        os.chown(socket_path, -1, gid)
        logger.info('%s: changed group to %d for %s %s', socket_path, gid,
                    kind.value, name)
        return None

    node = FileNode.from_path(socket_path)
    if kind is PrincipalKind.GROUP:
        acl = modify_group(node, name, perms)
    else:
        acl = modify_user(node, name, perms)
    logger.info('%s: granted %s %s %s', socket_path, kind.value, name,
                perm_str(perms))
    return acl


def configure_socket(config):
    """Apply config to its socket.  Any exception is fatal to startup."""
    return grant_principal_access(config.socket_path, config.principal_kind,
                                  config.principal, config.perms,
                                  shared_group=config.shared_group)
