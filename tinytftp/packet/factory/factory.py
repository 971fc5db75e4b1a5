import logging
import struct

from typing import Union

from tinytftp.packet import types
from tinytftp.exceptions import TftpDecodeError
from tinytftp.shared import TftpErrors

logger = logging.getLogger('tinytftp.packet.factory')

packet_type = Union[
    types.ReadRQ,
    types.WriteRQ,
    types.Ack,
    types.Data,
    types.Error
]

class PacketFactory:
    """This class generates TftpPacket objects. It is responsible for parsing
    raw buffers off of the wire and returning objects representing them, via
    the parse() method."""

    _classes = {
        1: types.ReadRQ,
        2: types.WriteRQ,
        3: types.Data,
        4: types.Ack,
        5: types.Error,
        }

    def parse(self, buffer: bytes) -> packet_type:
        """This method is used to parse an existing datagram into its
        corresponding TftpPacket object.

        Args:
            buffer (bytes): Packet Data

        Raises:
            TftpDecodeError: The buffer is too short or the opcode is unknown

        Returns:
            types: packet type base on the opcode
        """

        logger.debug(f"parsing a {len(buffer)} byte packet")
        if len(buffer) < 2:
            raise TftpDecodeError(f"malformed packet of {len(buffer)} bytes")

        (opcode,) = struct.unpack("!H", buffer[:2])
        logger.debug(f"opcode is {opcode}")
        packet = self.__create(opcode)
        packet.buffer = bytes(buffer)
        return packet.decode()

    def __create(self, opcode: int) -> packet_type:
        """This method returns the appropriate class object corresponding to
        the passed opcode.

        Args:
            opcode (int): The opcode from the buffer

        Raises:
            TftpDecodeError: Unknown opcode

        Returns:
            types: The Appropriate packet type class
        """

        if opcode not in self._classes:
            raise TftpDecodeError(f"Illegal TFTP operation: opcode {opcode}",
                                  error_code=TftpErrors.ILLEGALTFTPOP)

        return self._classes[opcode]()
