#!/usr/bin/env python
# vim: ts=4 sw=4 et ai:
# -*- coding: utf8 -*-
"""Interactive TFTP client. Whatever isn't given on the command line is
prompted for: server address, port, operation and file name. The local file
has the same name as the remote one."""

import sys

from optparse import OptionParser

from tinytftp.client import TftpClient
from tinytftp.exceptions import TftpException
from tinytftp.packet.types import Data
from tinytftp.shared import SOCK_TIMEOUT, TIMEOUT_RETRIES
from . import setup_logging

OPERATIONS = ('get', 'put')

class Progress:
    def __init__(self, out):
        self.progress = 0
        self.out = out

    def progresshook(self, pkt):
        if isinstance(pkt, Data):
            self.progress += len(pkt.data)
            self.out(f"Transferred {self.progress} bytes")

def prompt(value, question, read=input):
    """Return value, or ask for it when it wasn't given."""
    if value:
        return value
    return read(question).strip()

def main(argv=None, read=input):
    usage = """usage: %prog [options] [get|put] [filename]

             get - download filename from the server
             put - upload filename to the server
             Missing parameters are prompted for."""
    parser = OptionParser(usage=usage)
    parser.add_option('-H',
                      '--host',
                      help='server address')
    parser.add_option('-p',
                      '--port',
                      help='server port')
    parser.add_option('-t',
                      '--timeout',
                      type='float',
                      default=SOCK_TIMEOUT,
                      help=f'seconds to wait for each reply (default: {SOCK_TIMEOUT})')
    parser.add_option('-r',
                      '--retries',
                      type='int',
                      default=TIMEOUT_RETRIES,
                      help=f'attempts per packet (default: {TIMEOUT_RETRIES})')
    parser.add_option('-l',
                      '--localip',
                      action='store',
                      dest='localip',
                      default=None,
                      help='local IP for client to bind to (ie. interface)')
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

    if len(args) > 2:
        parser.error("Incorrect number of arguments")

    if options.debug and options.quiet:
        sys.stderr.write("The --debug and --quiet options are "
                         "mutually exclusive.\n")
        parser.print_help()
        sys.exit(1)

    log = setup_logging(options.debug, options.quiet)

    args += [None] * (2 - len(args))
    try:
        host = prompt(options.host, "Enter server IP : ", read)
        port = prompt(options.port, "Enter server port : ", read)
        operation = prompt(args[0], "Request (get or put) : ", read)
        filename = prompt(args[1], "Name of the File : ", read)
    except EOFError:
        sys.stderr.write("Missing connection parameters\n")
        sys.exit(1)

    if operation not in OPERATIONS:
        sys.stderr.write(f"Invalid request type: {operation}\n")
        sys.exit(1)

    try:
        port = int(port)
    except ValueError:
        sys.stderr.write(f"Invalid port: {port}\n")
        sys.exit(1)

    progresshook = Progress(log.info).progresshook

    try:
        tclient = TftpClient(host, port, options.localip)
        if operation == 'get':
            tclient.download(filename,
                             filename,
                             progresshook,
                             timeout=options.timeout,
                             retries=options.retries)
        else:
            tclient.upload(filename,
                           filename,
                           progresshook,
                           timeout=options.timeout,
                           retries=options.retries)
    except (TftpException, ValueError) as err:
        sys.stderr.write("%s\n" % str(err))
        sys.exit(1)
    except KeyboardInterrupt:
        sys.exit(1)

if __name__ == '__main__':
    main()
