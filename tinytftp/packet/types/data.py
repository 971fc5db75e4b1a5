import struct
import logging

from .base import TftpPacket
from tinytftp.shared import tftpassert, DEF_BLKSIZE
from tinytftp.exceptions import TftpDecodeError

logger = logging.getLogger('tinytftp.packet.types.data')

class Data(TftpPacket):
    """
           2 bytes  2 bytes  n bytes
           ---------------------~~--
    DATA  | 03    | Block # | Data  |
           ---------------------~~--
    """

    fields = ('blocknumber', 'data')

    def __init__(self, blocknumber: int = 0, data: bytes = b"") -> None:
        super().__init__()
        self.opcode = 3
        self.blocknumber = blocknumber
        self.data = data

    def __str__(self) -> str:
        return f"DAT packet: block {self.blocknumber}, {len(self.data)} bytes"

    def encode(self) -> 'Data':
        """Encode the Data packet.

        Returns:
            Data: self
        """

        tftpassert(len(self.data) <= DEF_BLKSIZE,
                   f"DAT payload of {len(self.data)} bytes exceeds {DEF_BLKSIZE}")

        if len(self.data) == 0:
            logger.debug("Encoding an empty DAT packet")

        fmt = b"!HH%ds" % len(self.data)
        self.buffer = struct.pack(fmt,
                                  self.opcode,
                                  self.blocknumber,
                                  self.data)

        return self

    def decode(self) -> 'Data':
        """Decode Data packet.

        Raises:
            TftpDecodeError: short header or oversized payload

        Returns:
            Data: self
        """

        if len(self.buffer) < 4:
            raise TftpDecodeError("malformed DAT packet, too short")

        # We know the first 2 bytes are the opcode. The second two are the
        # block number.
        (self.blocknumber,) = struct.unpack("!H", self.buffer[2:4])
        logger.debug(f"decoding DAT packet, block number {self.blocknumber}")

        # Everything else is data.
        self.data = self.buffer[4:]
        if len(self.data) > DEF_BLKSIZE:
            raise TftpDecodeError(f"malformed DAT packet, {len(self.data)} bytes of data")

        logger.debug(f"found {len(self.data)} bytes of data")
        return self
