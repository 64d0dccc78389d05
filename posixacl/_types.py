# SPDX-License-Identifier: LGPL-3.0-or-later
"""
Value types for POSIX1E ACLs as stored in the system.posix_acl_* xattrs.

POSIXAce and POSIXACL are immutable.  Every mutation helper returns a new
POSIXACL; nothing here touches the filesystem.
"""

import dataclasses
import enum

from ._exceptions import InvariantViolation


UNDEFINED_ID = 0xFFFFFFFF


class ACLType(enum.Enum):
    ACCESS = 'system.posix_acl_access'
    DEFAULT = 'system.posix_acl_default'

    @property
    def xattr_name(self):
        return self.value


class POSIXTag(enum.IntEnum):
    USER_OBJ = 0x01
    USER = 0x02
    GROUP_OBJ = 0x04
    GROUP = 0x08
    MASK = 0x10
    OTHER = 0x20


class POSIXPerm(enum.IntFlag):
    EXECUTE = 0x01
    WRITE = 0x02
    READ = 0x04
    ALL = 0x07


class PermClass(enum.Enum):
    """Mode-bit permission classes; the value is the field's bit shift."""
    OWNER = 6
    GROUP = 3
    OTHER = 0

    @property
    def shift(self):
        return self.value


NAMED_TAGS = frozenset((POSIXTag.USER, POSIXTag.GROUP))
SPECIAL_TAGS = frozenset((POSIXTag.USER_OBJ, POSIXTag.GROUP_OBJ,
                          POSIXTag.MASK, POSIXTag.OTHER))


@dataclasses.dataclass(frozen=True, slots=True)
class POSIXAce:
    """POSIX ACL entry.

    id is the uid/gid for USER/GROUP and UNDEFINED_ID for every other tag.
    """
    tag: POSIXTag
    perms: POSIXPerm
    id: int = UNDEFINED_ID

    def __post_init__(self):
        try:
            tag = POSIXTag(self.tag)
        except ValueError:
            raise InvariantViolation(f'invalid POSIX tag: {self.tag!r}') from None
        if not 0 <= int(self.perms) <= POSIXPerm.ALL:
            raise InvariantViolation(f'invalid POSIX perms: {self.perms!r}')
        if tag in SPECIAL_TAGS:
            if self.id != UNDEFINED_ID:
                raise InvariantViolation(
                    f'{tag.name} entry must carry the undefined id, '
                    f'got {self.id}')
        elif not 0 <= self.id < UNDEFINED_ID:
            raise InvariantViolation(
                f'{tag.name} entry requires a uid/gid, got {self.id}')
        object.__setattr__(self, 'tag', tag)
        object.__setattr__(self, 'perms', POSIXPerm(int(self.perms)))

    @property
    def sort_key(self):
        return (int(self.tag), self.id)


@dataclasses.dataclass(frozen=True, slots=True)
class POSIXACL:
    """Ordered entries of one ACL class (access or default).

    Entries are sorted by (tag, id) and unique per (tag, id).  An empty
    POSIXACL means no xattr is stored and the mode bits are authoritative.
    """
    aces: tuple = ()

    version = 2

    def __post_init__(self):
        aces = tuple(self.aces)
        for ace in aces:
            if not isinstance(ace, POSIXAce):
                raise TypeError(f'expected POSIXAce, got {type(ace).__name__}')
        for prev, cur in zip(aces, aces[1:]):
            if prev.sort_key == cur.sort_key:
                raise InvariantViolation(
                    f'duplicate {cur.tag.name} entry for id {cur.id}')
            if prev.sort_key > cur.sort_key:
                raise InvariantViolation(
                    f'{cur.tag.name} entry out of order after '
                    f'{prev.tag.name}')
        object.__setattr__(self, 'aces', aces)

    @classmethod
    def from_aces(cls, aces):
        return cls(tuple(aces))

    @property
    def trivial(self):
        """True when the list carries no USER, GROUP or MASK entries."""
        return not any(a.tag in NAMED_TAGS or a.tag == POSIXTag.MASK
                       for a in self.aces)

    def get(self, tag, id=UNDEFINED_ID):
        """Return the entry for (tag, id), or None."""
        for ace in self.aces:
            if ace.tag == tag and ace.id == id:
                return ace
        return None

    def __len__(self):
        return len(self.aces)

    def __iter__(self):
        return iter(self.aces)

    def __getitem__(self, idx):
        return self.aces[idx]

    def __bool__(self):
        return bool(self.aces)
