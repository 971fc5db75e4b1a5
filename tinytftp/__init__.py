# vim: ts=4 sw=4 et ai:
# -*- coding: utf8 -*-
"""
This library implements the tftp protocol, based on rfc 1350.
http://www.faqs.org/rfcs/rfc1350.html
At the moment it implements the base protocol only, in octet mode, with
lock-step transfers and timeout driven retransmission.

The main interface is the TftpClient and TftpServer classes.
"""

from .client import TftpClient
from .server import TftpServer, TransferResult
from .exceptions import (TftpException, TftpIOError, TftpFileError,
                         TftpFileNotFoundError, TftpDecodeError,
                         TftpProtocolError, TftpTimeout, TftpRetriesExhausted,
                         TftpRemoteError)
from .packet import encode, decode
