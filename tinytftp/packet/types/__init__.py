"""Packet classes, one per TFTP opcode."""

from .base import TftpPacket
from .request import ReadRQ, WriteRQ
from .data import Data
from .acknowledge import Ack
from .error import Error
