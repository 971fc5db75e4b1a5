# vim: ts=4 sw=4 et ai:
# -*- coding: utf8 -*-

"""This module holds all objects shared by all other modules in tinytftp."""

from collections import namedtuple

DEF_BLKSIZE = 512
MAX_PACKET_SIZE = DEF_BLKSIZE + 4
SOCK_TIMEOUT = 3
TIMEOUT_RETRIES = 5
DEF_TFTP_PORT = 69
DEF_SERVER_PORT = 8069
MAX_BLOCKNUMBER = 2 ** 16
MODE = 'octet'

# The remote end of a transfer. The port is the peer's transfer id.
TransferId = namedtuple('TransferId', ['address', 'port'])

def tftpassert(condition, msg):
    """This function is a simple utility that will check the condition
    passed for a false state. If it finds one, it throws an AssertionError
    with the message passed. It guards against programming errors, never
    against what arrives on the wire."""
    if not condition:
        raise AssertionError(msg)

class TftpErrors:
    """This class is a convenience for defining the common tftp error codes,
    and making them more readable in the code."""
    NOTDEFINED = 0
    FILENOTFOUND = 1
    ACCESSVIOLATION = 2
    DISKFULL = 3
    ILLEGALTFTPOP = 4
    UNKNOWNTID = 5
    FILEALREADYEXISTS = 6
    NOSUCHUSER = 7

class Phase:
    """Lifecycle of a single transfer."""
    IDLE = 'idle'
    REQUEST_SENT = 'request-sent'
    TRANSFERRING = 'transferring'
    COMPLETED = 'completed'
    ABORTED = 'aborted'
