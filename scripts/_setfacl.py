# SPDX-License-Identifier: LGPL-3.0-or-later

import argparse
import sys

import posixacl as pa


_NAMED_TAGS = (pa.POSIXTag.USER, pa.POSIXTag.GROUP)


def _modify_order(item):
    # Base entries first so that named entries are seeded from the final
    # mode; an explicit mask last so nothing overwrites it.
    ace, _ = item
    if ace.tag == pa.POSIXTag.MASK:
        return 2
    return 1 if ace.tag in _NAMED_TAGS else 0


def _apply_remove(node, specs, default_only):
    touched = set()
    for tag, id_, dflt in specs:
        acl_type = (pa.ACLType.DEFAULT if dflt or default_only
                    else pa.ACLType.ACCESS)
        pa.remove_named_entry(node, tag, id_, acl_type, recalc=False)
        touched.add(acl_type)
    return touched


def _apply_modify(node, aces, default_only):
    touched = set()
    for ace, dflt in sorted(aces, key=_modify_order):
        acl_type = (pa.ACLType.DEFAULT if dflt or default_only
                    else pa.ACLType.ACCESS)
        if ace.tag in _NAMED_TAGS:
            pa.modify_principal(node, ace.tag, ace.id, ace.perms, acl_type,
                                recalc=False)
        else:
            pa.modify_base_entry(node, ace.tag, ace.perms, acl_type)
        touched.add(acl_type)
    return touched


def _recalc_masks(node, acl_types):
    for acl_type in sorted(acl_types, key=lambda t: t.value):
        acl = pa.read_acl(node, acl_type)
        new_acl = pa.recalc_mask(acl)
        if new_acl != acl:
            pa.flush_acl(node, new_acl, acl_type)


def _do_setfacl(path, strip, remove_default, remove_entries, modify_entries,
                no_mask, default_only):
    """Apply operations to path in -b, -k, -x, -m order."""
    node = pa.FileNode.from_path(path)

    if strip:
        pa.remove_acl(node, pa.ACLType.ACCESS)
    if remove_default:
        pa.remove_acl(node, pa.ACLType.DEFAULT)

    specs = [pa.parse_remove_spec(e) for e in remove_entries]
    aces = [pa.parse_ace(e) for e in modify_entries]
    has_explicit_mask = any(ace.tag == pa.POSIXTag.MASK for ace, _ in aces)

    touched = _apply_remove(node, specs, default_only)
    touched |= _apply_modify(node, aces, default_only)
    if not no_mask and not has_explicit_mask:
        _recalc_masks(node, touched)
    return node


def main():
    ap = argparse.ArgumentParser(
        prog='posixacl_setfacl',
        description='Set POSIX ACL entries on files.',
    )
    ap.add_argument('-b', '--strip', action='store_true',
                    help='Remove the access ACL, leaving the mode bits')
    ap.add_argument('-k', '--remove-default', action='store_true',
                    help='Remove the default ACL')
    ap.add_argument('-d', '--default', dest='default_only',
                    action='store_true',
                    help='Apply -m and -x to the default ACL')
    ap.add_argument('-m', dest='modify', action='append', default=[],
                    metavar='entries',
                    help='Add/replace ACL entries (comma-separated); '
                         'applied after -b, -k, and -x')
    ap.add_argument('-x', dest='remove', action='append', default=[],
                    metavar='entries',
                    help='Remove named user/group entries (comma-separated); '
                         'applied after -b and -k')
    ap.add_argument('-n', '--no-mask', action='store_true',
                    help='Do not recalculate the mask after -m and -x')
    ap.add_argument('path', nargs='+')
    args = ap.parse_args()

    remove_entries = pa.split_entries(','.join(args.remove))
    modify_entries = pa.split_entries(','.join(args.modify))

    rc = 0
    for path in args.path:
        try:
            _do_setfacl(path, args.strip, args.remove_default,
                        remove_entries, modify_entries, args.no_mask,
                        args.default_only)
        except (OSError, ValueError) as e:
            print(f'posixacl_setfacl: {path}: {e}', file=sys.stderr)
            rc = 1

    sys.exit(rc)


if __name__ == '__main__':
    main()
