import logging
import os
import sys

from typing import Union
from io import IOBase

from .base import Context
from tinytftp.packet import types
from tinytftp.exceptions import TftpFileError, TftpFileNotFoundError
from tinytftp.states import SentReadRQ, SentWriteRQ

logger = logging.getLogger('tinytftp.context.client')

class Upload(Context):
    """The upload context for the client during an upload.
    Note: If input is a hyphen, then we will use stdin."""

    def __init__(self, host: str, port: int, timeout: float,
                 input: Union[IOBase, str], **kwargs) -> None:
        """Upload context for uploading data to a server.

        Args:
            host (str): Server Address
            port (int): Server Port
            timeout (float): socket timeout
            input ([IOBase,str]): Input data, can be one of
                - An open file object
                - A path to a file
                - a '-' indicating read from STDIN

        Raises:
            TftpFileNotFoundError: the input file doesn't exist
            TftpFileError: the input file can't be opened
        """

        super().__init__(host, port, timeout, **kwargs)

        # If the input object has a read() function, assume it is file-like.
        if hasattr(input, 'read'):
            self.fileobj = input
        elif input == '-':
            self.fileobj = sys.stdin.buffer
        else:
            try:
                self.fileobj = open(input, "rb")
            except FileNotFoundError:
                self.end()
                raise TftpFileNotFoundError(f"Could not open file for reading: {input}")
            except OSError as err:
                self.end()
                raise TftpFileError(f"Could not open file for reading: {input}: {err}")
            self.owns_fileobj = True

        logger.debug(f"Upload: file_to_transfer = {self.file_to_transfer}")

    def start(self) -> None:
        """Send the write request and the file to the server."""

        logger.info(f"Sending tftp upload request to {self.host}")
        logger.info(f"    filename -> {self.file_to_transfer}")

        self.metrics.start()

        pkt = types.WriteRQ(self.file_to_transfer)
        self.send(pkt)
        self.last_pkt = pkt
        self.state = SentWriteRQ(self)

        self.transfer()


class Download(Context):
    """The download context for the client during a download.
    Note: If output is a hyphen, then the output will be sent to stdout."""

    def __init__(self, host: str, port: int, timeout: float,
                 output: Union[IOBase, str], **kwargs) -> None:
        """Initalize the Download context with the server and
           where to save the data

        Args:
            host (str): Server Address
            port (int): Server port
            timeout (float): Socket Timeout
            output (Union[IOBase,str]): Output data, can be one of
                - An open file object
                - A path to a file
                - '-' indicating write to STDOUT

        Raises:
            TftpFileError: unable to open the destination file for writing
        """

        super().__init__(host, port, timeout, **kwargs)

        # If the output object has a write() function, assume it is file-like.
        if hasattr(output, 'write'):
            self.fileobj = output
        # If the output filename is -, then use stdout
        elif output == '-':
            self.fileobj = sys.stdout.buffer
        else:
            try:
                self.fileobj = open(output, "wb")
            except OSError as err:
                self.end()
                raise TftpFileError(f"Could not open output file {output}: {err}")
            self.owns_fileobj = True

        logger.debug(f"Download: file_to_transfer = {self.file_to_transfer}")

    def start(self) -> None:
        """Send the read request and receive the file.

        Raises:
            TftpRetriesExhausted: the server never answered
            TftpRemoteError: the server refused or aborted the transfer
        """

        logger.info(f"Sending tftp download request to {self.host}")
        logger.info(f"    filename -> {self.file_to_transfer}")

        self.metrics.start()

        try:
            pkt = types.ReadRQ(self.file_to_transfer)
            self.send(pkt)
            # Until the first DAT arrives a timeout resends the request itself.
            self.last_pkt = pkt
            self.next_block = 1
            self.state = SentReadRQ(self)

            self.transfer()
        except Exception:
            # Don't leave a partial file behind when we created it.
            if self.owns_fileobj:
                self.end()
                if os.path.exists(self.fileobj.name):
                    logger.debug(f"unlinking output file of {self.fileobj.name}")
                    os.unlink(self.fileobj.name)
            raise
