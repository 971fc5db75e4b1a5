import struct
import logging

from tinytftp.shared import tftpassert, MODE
from tinytftp.exceptions import TftpException, TftpDecodeError

logger = logging.getLogger('tinytftp.packet.types.base')

class TftpPacket:
    """This class is the parent class of all tftp packet classes. It is an
    abstract class, providing an interface, and should not be instantiated
    directly."""

    # Attributes that make up the value of a packet, used for equality.
    fields = ()

    def __init__(self) -> None:
        self.opcode = 0
        self.buffer = None

    def __eq__(self, other) -> bool:
        if not isinstance(other, TftpPacket) or self.opcode != other.opcode:
            return NotImplemented

        return all(getattr(self, name) == getattr(other, name) for name in self.fields)

    def __repr__(self) -> str:
        values = ", ".join(f"{name}={getattr(self, name)!r}" for name in self.fields)
        return f"{self.__class__.__name__}({values})"

    def encode(self) -> 'TftpPacket':
        """The encode method of a TftpPacket packs an appropriate buffer in
        network-byte order suitable for sending over the wire, from the
        properties of the instance.

        This is an abstract method."""
        raise NotImplementedError

    def decode(self) -> 'TftpPacket':
        """The decode method of a TftpPacket takes a buffer off of the wire in
        network-byte order, and decodes it, populating internal properties as
        appropriate. This can only be done once the first 2-byte opcode has
        already been decoded, but the data section does include the entire
        datagram.

        This is an abstract method."""
        raise NotImplementedError


class TftpPacketInitial(TftpPacket):
    """This class is a common parent class for the RRQ and WRQ packets, as
    they share all of their code."""

    fields = ('filename', 'mode')
    name = None

    def __init__(self, filename: str = None, mode: str = MODE) -> None:
        super().__init__()
        self.filename = filename
        self.mode = mode.lower() if isinstance(mode, str) else mode

    def __str__(self) -> str:
        return f"{self.name} packet: filename = {self.filename} mode = {self.mode}"

    def encode(self) -> 'TftpPacketInitial':
        """Encode the packet's buffer from the instance variables.

        Raises:
            TftpException: Unsupported mode or a filename that isn't ascii

        Returns:
            TftpPacketInitial: self
        """

        tftpassert(self.filename, "filename required in initial packet")
        tftpassert(self.mode, "mode required in initial packet")

        filename = self.filename
        mode = self.mode

        if not isinstance(filename, bytes):
            try:
                filename = filename.encode('ascii')
            except UnicodeEncodeError:
                raise TftpException(f"Filename must be ascii: {self.filename!r}")

        if isinstance(mode, bytes):
            mode = mode.decode('ascii', 'replace')

        if mode.lower() != MODE:
            raise TftpException(f"Unsupported mode: {self.mode}")

        # The mode goes on the wire in its canonical spelling.
        self.mode = MODE
        mode = MODE.encode('ascii')

        logger.debug(f"Encoding {self.name} packet, filename = {filename}, mode = {mode}")

        fmt = b"!H%dsx%dsx" % (len(filename), len(mode))
        self.buffer = struct.pack(fmt, self.opcode, filename, mode)

        logger.debug(f"buffer is {self.buffer!r}")
        return self

    def decode(self) -> 'TftpPacketInitial':
        """Decode the filename and mode from the buffer. Anything following
        the mode is ignored, as option negotiation is not supported.

        Raises:
            TftpDecodeError: the buffer doesn't hold two null terminated strings

        Returns:
            TftpPacketInitial: self
        """

        subbuf = self.buffer[2:]
        parts = subbuf.split(b"\x00")

        # A well formed request yields filename, mode and a trailing remainder.
        if len(parts) < 3 or not parts[0] or not parts[1]:
            raise TftpDecodeError(f"malformed {self.name} packet")

        if len(parts) > 3 and any(parts[2:]):
            logger.debug(f"ignoring trailing request fields: {parts[2:]}")

        try:
            self.filename = parts[0].decode('ascii')
            self.mode = parts[1].decode('ascii').lower()
        except UnicodeDecodeError:
            raise TftpDecodeError(f"malformed {self.name} packet, non ascii strings")

        logger.debug(f"set filename to {self.filename}")
        logger.debug(f"set mode to {self.mode}")
        return self
