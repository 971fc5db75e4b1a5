import logging
import struct

from .base import TftpPacket
from tinytftp.exceptions import TftpException, TftpDecodeError

logger = logging.getLogger('tinytftp.packet.types.error')

class Error(TftpPacket):
    """
        Error Packet

            2 bytes   2 bytes      string   1 byte
            --------------------------------------
     ERROR | 05     | ErrorCode |  ErrMsg  |   0  |
            --------------------------------------

    Error Codes

    Value     Meaning

    0         Not defined, see error message (if any).
    1         File not found.
    2         Access violation.
    3         Disk full or allocation exceeded.
    4         Illegal TFTP operation.
    5         Unknown transfer ID.
    6         File already exists.
    7         No such user.
    """

    fields = ('errorcode', 'message')

    errmsgs = {
        0: "Not defined",
        1: "File not found",
        2: "Access violation",
        3: "Disk full or allocation exceeded",
        4: "Illegal TFTP operation",
        5: "Unknown transfer ID",
        6: "File already exists",
        7: "No such user",
        }

    def __init__(self, errorcode: int = 0, errmsg: str = None) -> None:
        super().__init__()
        self.opcode = 5
        self.errorcode = errorcode
        self.errmsg = errmsg

    def __str__(self) -> str:
        return f"ERR packet: errorcode = {self.errorcode}, msg = {self.message}"

    @property
    def message(self) -> str:
        """The message carried, or the standard text for the error code."""
        if self.errmsg is not None:
            return self.errmsg
        return self.errmsgs.get(self.errorcode, "")

    def encode(self) -> 'Error':
        """Encode the Error packet from the errorcode and message.

        Raises:
            TftpException: a message that isn't ascii

        Returns:
            Error: self
        """

        try:
            message = self.message.encode('ascii')
        except UnicodeEncodeError:
            raise TftpException(f"Error message must be ascii: {self.message!r}")

        fmt = b"!HH%dsx" % len(message)
        logger.debug(f"encoding ERR packet with fmt {fmt}")
        self.buffer = struct.pack(fmt,
                                  self.opcode,
                                  self.errorcode,
                                  message)

        return self

    def decode(self) -> 'Error':
        """Decode Error packet. A missing terminating null is tolerated.

        Raises:
            TftpDecodeError: fewer than 4 bytes

        Returns:
            Error: self
        """

        buflen = len(self.buffer)
        if buflen < 4:
            raise TftpDecodeError("malformed ERR packet, too short")

        logger.debug(f"Decoding ERR packet, length {buflen} bytes")
        self.opcode, self.errorcode = struct.unpack("!HH", self.buffer[:4])
        self.errmsg = self.buffer[4:].split(b"\x00", 1)[0].decode('ascii', 'replace')

        logger.debug(f"ERR packet - errorcode: {self.errorcode}, message: {self.errmsg}")
        return self
