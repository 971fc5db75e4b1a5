import logging
import os

from .base import Context
from tinytftp.exceptions import TftpDecodeError, TftpProtocolError
from tinytftp.packet import types
from tinytftp.shared import TftpErrors, TransferId
from tinytftp.states import Start

logger = logging.getLogger('tinytftp.context.server')

class Server(Context):
    """The context for the server side of one transfer. It talks to the
    client from its own endpoint, whose port is the server's transfer id."""

    def __init__(self, host: str, port: int, timeout: float, root: str,
                 **kwargs) -> None:
        """Prepare the server context to process data from a client

        Args:
            host (str): The requesting clients IP
            port (int): The requesting clients Port
            timeout (float): socket timeout
            root (str): absolute server root path
        """

        super().__init__(host, port, timeout, **kwargs)

        # The request fixes the client's transfer id.
        self.peer = TransferId(self.address, self.port)
        self.owns_fileobj = True
        self.root = root
        # Set once an upload has created its file.
        self.created_path = None

        # At this point we have no idea if this is a download or an upload. We
        # need to let the start state determine that.
        self.state = Start(self)

    def start(self, buffer: bytes) -> None:
        """Handle the request and run the transfer it asks for to completion.

        Args:
            buffer (bytes): Buffer Data received from the client.
                Should be either a read or write request

        Raises:
            TftpException: the transfer was refused or aborted
        """

        logger.debug("In tinytftp.context.server.start")
        self.metrics.start()

        try:
            pkt = self.factory.parse(buffer)
        except TftpDecodeError as err:
            self.send(types.Error(TftpErrors.ILLEGALTFTPOP))
            raise TftpProtocolError(f"Invalid request from {self.host}:{self.port}: {err}",
                                    error_code=TftpErrors.ILLEGALTFTPOP)

        logger.debug(f"factory returned a {pkt}")

        # Call handle once with the initial packet. This should put us into
        # the download or the upload state.
        try:
            self.state = self.state.handle(pkt, self.host, self.port)

            self.transfer()
        except Exception:
            # An aborted upload leaves no partial file in the root.
            if self.created_path is not None:
                self.end()
                if os.path.exists(self.created_path):
                    logger.debug(f"unlinking partial upload {self.created_path}")
                    os.unlink(self.created_path)
            raise
