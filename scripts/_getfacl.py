# SPDX-License-Identifier: LGPL-3.0-or-later

import argparse
import json
import sys

import posixacl as pa


def _read_node_acls(path):
    """Return (node, access, default) for path.

    access falls back to the 3-entry ACL implied by the mode bits.
    """
    node = pa.FileNode.from_path(path)
    access = pa.get_effective_acl(node)
    default = pa.POSIXACL()
    if node.isdir:
        default = pa.read_acl(node, pa.ACLType.DEFAULT)
    return node, access, default


def _output_acl(path, numeric, quiet, use_json, skip_base):
    node, access, default = _read_node_acls(path)
    if skip_base and access.trivial and not default:
        return
    if use_json:
        print(json.dumps(pa.acl_to_dict(path, node.uid, node.gid, access,
                                        default, numeric)))
    else:
        print(pa.format_acl_text(path, node.uid, node.gid, access, default,
                                 numeric, quiet))
        print()


def main():
    ap = argparse.ArgumentParser(
        prog='posixacl_getfacl',
        description='Display POSIX ACL entries for files.',
    )
    ap.add_argument('-n', '--numeric', action='store_true',
                    help='Display numeric UIDs/GIDs')
    ap.add_argument('-q', '--quiet', action='store_true',
                    help='Omit comment headers (text mode only)')
    ap.add_argument('-s', '--skip-base', action='store_true',
                    help='Skip files that only have the base ACL entries '
                         '(i.e. trivial ACL derived from mode bits)')
    ap.add_argument('-j', '--json', dest='use_json', action='store_true',
                    help='Output ACLs as JSONL (one object per line)')
    ap.add_argument('path', nargs='+')
    args = ap.parse_args()

    rc = 0
    for path in args.path:
        try:
            _output_acl(path, args.numeric, args.quiet, args.use_json,
                        args.skip_base)
        except (OSError, ValueError) as e:
            print(f'posixacl_getfacl: {path}: {e}', file=sys.stderr)
            rc = 1

    sys.exit(rc)


if __name__ == '__main__':
    main()
