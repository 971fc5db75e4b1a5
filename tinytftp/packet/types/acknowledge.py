import logging
import struct

from .base import TftpPacket
from tinytftp.exceptions import TftpDecodeError

logger = logging.getLogger('tinytftp.packet.types.acknowledge')

class Ack(TftpPacket):
    """
    Acknowledgement Packet
           2 bytes  2 bytes
           -----------------
    ACK   | 04    | Block # |
           -----------------
    """

    fields = ('blocknumber',)

    def __init__(self, blocknumber: int = 0) -> None:
        super().__init__()
        self.opcode = 4
        self.blocknumber = blocknumber

    def __str__(self) -> str:
        return f"ACK packet: block {self.blocknumber}"

    def encode(self) -> 'Ack':
        """Encode acknowlegement packet for sending

        Returns:
            Ack: self
        """

        logger.debug(f"encoding ACK: opcode = {self.opcode}, block = {self.blocknumber}")
        self.buffer = struct.pack("!HH", self.opcode, self.blocknumber)
        return self

    def decode(self) -> 'Ack':
        """Decode an acknowlegement packet

        Raises:
            TftpDecodeError: fewer than 4 bytes

        Returns:
            Ack: self
        """

        if len(self.buffer) < 4:
            raise TftpDecodeError("malformed ACK packet, too short")

        if len(self.buffer) > 4:
            logger.debug("detected TFTP ACK but request is too large, will truncate")
            logger.debug(f"buffer was: {self.buffer!r}")

        self.opcode, self.blocknumber = struct.unpack("!HH", self.buffer[0:4])
        logger.debug(f"decoded ACK packet: opcode = {self.opcode}, block = {self.blocknumber}")
        return self
