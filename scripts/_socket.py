# SPDX-License-Identifier: LGPL-3.0-or-later

import argparse
import dataclasses
import logging
import sys

import posixacl as pa


def main():
    ap = argparse.ArgumentParser(
        prog='posixacl_socket',
        description='Grant the configured peer access to a bound unix '
                    'socket (APP_ENV, POSIXACL_SOCKET_* environment).',
    )
    ap.add_argument('--path', default=None,
                    help='Socket path; overrides POSIXACL_SOCKET_PATH')
    ap.add_argument('-v', '--verbose', action='store_true',
                    help='Log ACL reads and writes')
    args = ap.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format='%(asctime)s %(levelname)s %(name)s: %(message)s',
    )

    try:
        config = pa.load_config()
        if args.path:
            config = dataclasses.replace(config, socket_path=args.path)
        pa.configure_socket(config)
    except (OSError, ValueError) as e:
        print(f'posixacl_socket: {e}', file=sys.stderr)
        sys.exit(1)

    sys.exit(0)


if __name__ == '__main__':
    main()
