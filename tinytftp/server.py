# vim: ts=4 sw=4 et ai:
# -*- coding: utf8 -*-
"""This module implements the TFTP Server functionality. Instantiate an
instance of the server, and then run the listen() method to serve client
requests. Requests are served one at a time: a transfer runs to completion
on its own endpoint before the next request is read."""

import os
import threading
import logging

from collections import namedtuple
from typing import List

from tinytftp.shared import SOCK_TIMEOUT, TIMEOUT_RETRIES, DEF_TFTP_PORT
from tinytftp.context import Server
from tinytftp.exceptions import TftpException, TftpTimeout
from tinytftp.transport import UdpEndpoint

logger = logging.getLogger('tinytftp.server')

class TransferResult(namedtuple('TransferResult', ['peer', 'filename', 'error', 'metrics'])):
    """The outcome of one transfer served. error is None on success."""

    __slots__ = ()

    @property
    def ok(self) -> bool:
        return self.error is None


class TftpServer:
    """This class implements a tftp server object. Run the listen() method to
    serve client requests."""

    def __init__(self, tftproot: str = None, listenip: str = None,
                 listenport: int = None) -> None:
        """Initialize the server

        Args:
            tftproot (str, optional): Server root. Defaults to the current directory.
            listenip (str, optional): Listening address. Defaults to 127.0.0.1.
            listenport (int, optional): Listening port, 0 picks a free one. Defaults to 69.

        Raises:
            TftpException: tftp root is not readable
            FileNotFoundError: the tftp root specified doesn't exist
        """

        self.listenip = listenip or '127.0.0.1'
        self.listenport = DEF_TFTP_PORT if listenport is None else listenport
        self.endpoint = None
        self.root = os.path.abspath(tftproot or '.')

        # A threading event to help threads synchronize with the server
        # is_running state.
        self.is_running = threading.Event()
        self.shutdown_gracefully = False

        if os.path.isdir(self.root):
            logger.debug(f"tftproot {self.root} exists")
            if not os.access(self.root, os.R_OK) or not os.access(self.root, os.W_OK):
                raise TftpException("The tftproot must be readable and writable")
        else:
            raise FileNotFoundError("The tftproot does not exist or isn't a directory")

    def listen(self, timeout: float = None, transfers: int = None,
               retries: int = TIMEOUT_RETRIES) -> List[TransferResult]:
        """Start a server listening on the supplied interface and port, and
        serve requests until transfers of them have been handled or stop()
        is called.

        Args:
            timeout (float, optional): seconds to wait for each reply. Defaults to SOCK_TIMEOUT
            transfers (int, optional): number of requests to serve, None for no limit
            retries (int, optional): attempts per packet. Defaults to TIMEOUT_RETRIES

        Raises:
            TftpIOError: Failed to bind to a the IP Address and port

        Returns:
            List[TransferResult]: one entry per request served
        """

        self.timeout = SOCK_TIMEOUT if timeout is None else timeout
        self.retries = retries
        results = []

        logger.info(f"Server requested on ip {self.listenip}, port {self.listenport}")
        self.endpoint = UdpEndpoint(self.listenip, self.listenport)
        _, self.listenport = self.endpoint.address
        logger.info(f"Starting TFTP server on {self.listenip}:{self.listenport}")

        self.is_running.set()
        try:
            while transfers is None or len(results) < transfers:
                if self.shutdown_gracefully:
                    logger.warning("Graceful shutdown requested, no more requests accepted")
                    break

                # Wake up now and then to notice a shutdown request.
                try:
                    buffer, (raddress, rport) = self.endpoint.receive(self.timeout)
                except TftpTimeout:
                    continue

                results.append(self.serve(buffer, raddress, rport))
        finally:
            self.endpoint.close()
            self.is_running.clear()
            self.shutdown_gracefully = False
            logger.debug("server returning from while loop")

        return results

    def serve(self, buffer: bytes, raddress: str, rport: int) -> TransferResult:
        """Run the transfer a request asks for. A failed transfer is logged
        and reported in the result, it doesn't stop the server.

        Args:
            buffer (bytes): the request datagram
            raddress (str): client address
            rport (int): client port

        Returns:
            TransferResult: the outcome
        """

        key = f"{raddress}:{rport}"
        logger.info(f"Creating new server context for session key = {key}")
        session = None
        error = None

        try:
            with Server(raddress, rport, self.timeout, self.root,
                        localip=self.listenip, retries=self.retries) as session:
                session.start(buffer)
        except TftpException as err:
            logger.error(f"Fatal exception thrown from session {key}: {err}")
            error = err
        else:
            logger.info("Successful transfer.")
            session.metrics.log_summary(logger, "Transferred")

        logger.info(f"Session {key} complete")
        return TransferResult(key,
                              session.file_to_transfer if session else None,
                              error,
                              session.metrics if session else None)

    def stop(self) -> None:
        """Stop the server gracefully. Do not take any new transfers, but
        complete the running one. The listening loop notices the request on
        its next wake up, at most one timeout later.
        """

        self.shutdown_gracefully = True
