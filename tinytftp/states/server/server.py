import logging

from typing import Union

from tinytftp.states.base import TftpState, ExpectData
from .base import TftpServerState
from tinytftp.exceptions import (TftpFileError, TftpFileNotFoundError,
                                 TftpProtocolError)
from tinytftp.states.states import ExpectAck
from tinytftp.packet import types
from tinytftp.shared import TftpErrors, Phase

logger = logging.getLogger('tinytftp.states.server.server')

class ReceiveReadRQ(TftpServerState):
    """This class represents the state of the TFTP server when it has just
    received an RRQ packet."""

    def handle(self, pkt: types.ReadRQ, raddress: str, rport: int) -> ExpectAck:
        """Handle an initial RRQ packet as a server.

        Args:
            pkt (types.ReadRQ): Packet Data
            raddress (str): Remote Address
            rport (int): Remote Port

        Raises:
            TftpFileNotFoundError: When the requested file can't be found
            TftpFileError: When the requested file can't be read

        Returns:
            ExpectAck: Next context state
        """

        self.server_initial(pkt)
        logger.info(f"Opening file {self.full_path} for reading")

        try:
            # Binary mode, octet is the only transfer mode.
            self.context.fileobj = open(self.full_path, "rb")
        except (FileNotFoundError, IsADirectoryError, NotADirectoryError):
            logger.warning(f"File not found: {self.full_path}")
            self.send_error(TftpErrors.FILENOTFOUND)
            raise TftpFileNotFoundError(f"File not found: {self.full_path}")
        except OSError as err:
            self.send_error(TftpErrors.ACCESSVIOLATION)
            raise TftpFileError(f"Could not open {self.full_path}: {err}",
                                error_code=TftpErrors.ACCESSVIOLATION)

        self.context.next_block = 1
        logger.debug("Starting send...")
        self.context.pending_complete = self.send_dat()

        return ExpectAck(self.context)


class ReceiveWriteRQ(TftpServerState):
    """This class represents the state of the TFTP server when it has just
    received a WRQ packet."""

    def handle(self, pkt: types.WriteRQ, raddress: str, rport: int) -> ExpectData:
        """Handle an initial WRQ packet as a server.

        Args:
            pkt (types.WriteRQ): Packet Data
            raddress (str): Remote Address
            rport (int): Remote Port

        Raises:
            TftpFileError: The file can't be created

        Returns:
            ExpectData: Next context state
        """

        self.server_initial(pkt)
        logger.info(f"Opening file {self.full_path} for writing")

        try:
            self.context.fileobj = open(self.full_path, "wb")
        except OSError as err:
            self.send_error(TftpErrors.ACCESSVIOLATION, "Cannot create file")
            raise TftpFileError(f"Cannot create file {self.full_path}: {err}",
                                error_code=TftpErrors.ACCESSVIOLATION)

        self.context.created_path = self.full_path

        self.send_ack(0)
        self.context.next_block = 1

        return ExpectData(self.context)


class Start(TftpState):
    """The start state for the server. This is a transitory state since at
    this point we don't know if we're handling an upload or a download. We
    will commit to one of them once we interpret the initial packet."""

    phase = Phase.IDLE

    def handle(self,
               pkt: Union[types.ReadRQ, types.WriteRQ],
               raddress: str,
               rport: int) -> Union[ExpectAck, ExpectData]:
        """Handle the first packet of an exchange.

        Args:
            pkt (Union[types.ReadRQ,types.WriteRQ]): Received Packet
            raddress (str): Remote client address
            rport (int): Remote client port

        Raises:
            TftpProtocolError: received a packet that can't begin a transfer

        Returns:
            Union[ExpectAck,ExpectData]: Returns the next state
        """

        if isinstance(pkt, types.ReadRQ):
            logger.debug("Handling an RRQ packet")
            return ReceiveReadRQ(self.context).handle(pkt, raddress, rport)

        elif isinstance(pkt, types.WriteRQ):
            logger.debug("Handling a WRQ packet")
            return ReceiveWriteRQ(self.context).handle(pkt, raddress, rport)

        elif isinstance(pkt, types.Data):
            self.send_error(TftpErrors.UNKNOWNTID, "No write request received")
            raise TftpProtocolError("Received DAT without a write request",
                                    error_code=TftpErrors.UNKNOWNTID)

        self.send_error(TftpErrors.ILLEGALTFTPOP)
        raise TftpProtocolError(f"Invalid packet to begin up/download: {pkt}",
                                error_code=TftpErrors.ILLEGALTFTPOP)
