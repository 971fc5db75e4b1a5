#!/usr/bin/env python
# vim: ts=4 sw=4 et ai:
# -*- coding: utf8 -*-
"""TFTP server. By default it serves a single transfer and exits, with a
non-zero status when that transfer failed."""

import sys

from optparse import OptionParser

from tinytftp.server import TftpServer
from tinytftp.exceptions import TftpException
from tinytftp.shared import SOCK_TIMEOUT, TIMEOUT_RETRIES, DEF_SERVER_PORT
from . import setup_logging

def main(argv=None):
    parser = OptionParser(usage="usage: %prog [options]")
    parser.add_option('-i',
                      '--listenip',
                      default='127.0.0.1',
                      help='ip to listen on (default: 127.0.0.1)')
    parser.add_option('-p',
                      '--port',
                      type='int',
                      default=DEF_SERVER_PORT,
                      help=f'local port to use (default: {DEF_SERVER_PORT})')
    parser.add_option('-r',
                      '--root',
                      default='.',
                      help='path to serve from (default: current directory)')
    parser.add_option('-n',
                      '--count',
                      type='int',
                      default=1,
                      help='transfers to serve before exiting, 0 for no limit (default: 1)')
    parser.add_option('-t',
                      '--timeout',
                      type='float',
                      default=SOCK_TIMEOUT,
                      help=f'seconds to wait for each reply (default: {SOCK_TIMEOUT})')
    parser.add_option('--retries',
                      type='int',
                      default=TIMEOUT_RETRIES,
                      help=f'attempts per packet (default: {TIMEOUT_RETRIES})')
    parser.add_option('-d',
                      '--debug',
                      action='store_true',
                      default=False,
                      help='upgrade logging from info to debug')
    parser.add_option('-q',
                      '--quiet',
                      action='store_true',
                      default=False,
                      help="downgrade logging from info to warning")
    options, args = parser.parse_args(argv)

    if args:
        parser.error("Unexpected arguments")

    if options.debug and options.quiet:
        sys.stderr.write("The --debug and --quiet options are "
                         "mutually exclusive.\n")
        parser.print_help()
        sys.exit(1)

    setup_logging(options.debug, options.quiet)

    try:
        server = TftpServer(options.root, options.listenip, options.port)
        results = server.listen(options.timeout,
                                transfers=options.count or None,
                                retries=options.retries)
    except (TftpException, OSError) as err:
        sys.stderr.write("%s\n" % str(err))
        sys.exit(1)
    except KeyboardInterrupt:
        sys.exit(0)

    if not all(result.ok for result in results):
        sys.exit(1)

if __name__ == '__main__':
    main()
