import logging
import os

from typing import Union

from tinytftp.states.base import TftpState
from tinytftp.exceptions import TftpProtocolError, TftpFileError
from tinytftp.shared import TftpErrors, Phase, MODE
from tinytftp.packet import types

logger = logging.getLogger('tinytftp.states.server.base')

class TftpServerState(TftpState):
    """The base class for server states."""

    phase = Phase.IDLE

    def __init__(self, context: 'Server') -> None:
        """Prepare the server state

        Args:
            context (Server): the server context
        """
        super().__init__(context)

        self.full_path = None # Absolute path of the file being managed

    def server_initial(self, pkt: Union[types.ReadRQ, types.WriteRQ]) -> str:
        """This method performs initial setup for a server context transfer:
        it checks the transfer mode and maps the requested filename into the
        server root.

        Args:
            pkt (types.ReadRQ,types.WriteRQ): Packet Data

        Raises:
            TftpProtocolError: When the mode isn't octet
            TftpFileError: When the requested file is outside of the servers root

        Returns:
            str: absolute path of the requested file
        """

        if pkt.mode != MODE:
            self.send_error(TftpErrors.ILLEGALTFTPOP, "Unsupported transfer mode")
            raise TftpProtocolError(f"Unsupported transfer mode requested: {pkt.mode}",
                                    error_code=TftpErrors.ILLEGALTFTPOP)

        logger.debug(f"Requested filename is {pkt.filename}")
        root = self.context.root

        # Filenames are relative to the server root. A leading '/' is
        # stripped, as os.path.join would otherwise treat it as absolute.
        full_path = os.path.abspath(os.path.join(root, pkt.filename.lstrip('/')))
        logger.debug(f"full_path is {full_path}")

        if full_path == root or os.path.commonpath([root, full_path]) != root:
            logger.warning("requested file is not within the server root - bad")
            self.send_error(TftpErrors.ACCESSVIOLATION)
            raise TftpFileError(f"bad file path: {pkt.filename}",
                                error_code=TftpErrors.ACCESSVIOLATION)

        logger.info("requested file is in the server root - good")
        self.full_path = full_path
        self.context.file_to_transfer = pkt.filename

        return full_path
