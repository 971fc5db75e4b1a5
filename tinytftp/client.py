# vim: ts=4 sw=4 et ai:
# -*- coding: utf8 -*-
"""This module implements the TFTP Client functionality. Instantiate an
instance of the client, and then use its upload or download method. Logging is
performed via the standard python logging module."""

import logging

from typing import Callable, Union, BinaryIO

from tinytftp.shared import SOCK_TIMEOUT, TIMEOUT_RETRIES, DEF_TFTP_PORT
from tinytftp.context import Upload, Download
from tinytftp.packet import types

logger = logging.getLogger('tinytftp.client')

class TftpClient:
    """This class is an implementation of a tftp client. Once instantiated, a
    download can be initiated via the download() method, or an upload via the
    upload() method. Every transfer either completes or raises a
    TftpException, with its socket and file closed."""

    def __init__(self, host: str, port: int = None, localip: str = None) -> None:
        """Initialize the TFTP client class

        Args:
            host (str): The server for which you are connecting to
            port (int, optional): The server port. Defaults to 69.
            localip (str, optional): The source ip for all requests. Defaults to None.
        """

        self.context = None
        self.host = host
        self.iport = port or DEF_TFTP_PORT
        self.localip = localip

    def download(self, filename: str, output: Union[BinaryIO, str],
                 packethook: Callable[[types.Data], None] = None,
                 timeout: float = SOCK_TIMEOUT,
                 retries: int = TIMEOUT_RETRIES) -> None:
        """This method initiates a tftp download from the configured remote
        host, requesting the filename passed. A packethook may be passed for the
        use of building a UI or to perform additional action on the received data.

        Args:
            filename (str): The name of the file to request from the server
            output (str): Where to save the file. Can be either a file-name/path,
                            a file-like object or a '-' for stdout
            packethook (Callable, optional): A function to receive a copy of the
                            Data object received. Defaults to None.
            timeout (float, optional): Time out period for each reply. Defaults to SOCK_TIMEOUT.
            retries (int, optional): Attempts per packet. Defaults to TIMEOUT_RETRIES.
        """

        logger.debug("Creating download context with the following params:")
        logger.debug(f" host = {self.host}, port = {self.iport}, filename = {filename}")
        logger.debug(f" packethook = {packethook}, timeout = {timeout}")
        self.context = Download(self.host,
                                self.iport,
                                timeout,
                                output,
                                packethook=packethook,
                                filename=filename,
                                localip=self.localip,
                                retries=retries)

        with self.context:
            self.context.start()

        logger.info("Download complete.")
        self.context.metrics.log_summary(logger, "Downloaded")

    def upload(self, filename: str, input: Union[BinaryIO, str],
               packethook: Callable[[types.Data], None] = None,
               timeout: float = SOCK_TIMEOUT,
               retries: int = TIMEOUT_RETRIES) -> None:
        """This method initiates a tftp upload to the configured remote host,
        uploading the filename passed. A packethook may be passed for the
        use of building a UI or validation when used in conjuction with a
        file like object.

        Args:
            filename (str): The filename to send to the server
            input (str): Where to read the file. Can be either a file-name/path,
                            a file-like object or a '-' for stdin
            packethook (Callable, optional): A function to receive a copy of the
                            Data object sent. Defaults to None.
            timeout (float, optional): Time out period for each reply. Defaults to SOCK_TIMEOUT.
            retries (int, optional): Attempts per packet. Defaults to TIMEOUT_RETRIES.
        """

        self.context = Upload(self.host,
                              self.iport,
                              timeout,
                              input,
                              packethook=packethook,
                              filename=filename,
                              localip=self.localip,
                              retries=retries)

        with self.context:
            self.context.start()

        logger.info("Upload complete.")
        self.context.metrics.log_summary(logger, "Uploaded")
