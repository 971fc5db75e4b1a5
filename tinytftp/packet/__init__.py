"""Framing of the five TFTP packet kinds.

encode() and decode() are the functional face of the codec; the packet
classes live in tinytftp.packet.types and the opcode dispatch in
tinytftp.packet.factory."""

from . import types
from .factory import PacketFactory

_factory = PacketFactory()

def encode(packet: types.TftpPacket) -> bytes:
    """Serialize a packet for the wire."""
    return packet.encode().buffer

def decode(buffer: bytes) -> types.TftpPacket:
    """Parse a datagram, raising TftpDecodeError when it is malformed."""
    return _factory.parse(buffer)
