import logging
import select
import socket

from typing import Tuple

from tinytftp.exceptions import TftpIOError, TftpTimeout

logger = logging.getLogger('tinytftp.transport.udp')

# Large enough to notice a peer sending oversized datagrams.
RECV_BUFSIZE = 65536

class UdpEndpoint:
    """A UDP socket that sends single datagrams and waits for one with a
    timeout. It doesn't know about peers, filtering traffic by transfer id is
    left to the context that owns it."""

    def __init__(self, localip: str = None, port: int = 0) -> None:
        """Create the socket and bind it when an address or port is given.

        Args:
            localip (str, optional): Local address to bind to. Defaults to None.
            port (int, optional): Local port, 0 picks an ephemeral one. Defaults to 0.

        Raises:
            TftpIOError: the socket couldn't be created or bound
        """

        try:
            self.sock = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)
        except OSError as err:
            raise TftpIOError(f"Could not create socket: {err}")

        if localip or port:
            try:
                self.sock.bind((localip or '', port))
            except OSError as err:
                self.sock.close()
                raise TftpIOError(f"Could not bind to {localip}:{port}: {err}")

            logger.debug(f"bound to {self.address}")

    def __enter__(self) -> 'UdpEndpoint':
        return self

    def __exit__(self, *args) -> None:
        self.close()

    def __str__(self) -> str:
        if self.closed:
            return "UdpEndpoint (closed)"
        return f"UdpEndpoint {self.address}"

    @property
    def address(self) -> Tuple[str, int]:
        """The local (ip, port) of the socket."""
        return self.sock.getsockname()

    @property
    def closed(self) -> bool:
        return self.sock.fileno() == -1

    def fileno(self) -> int:
        return self.sock.fileno()

    def send_to(self, buffer: bytes, address: Tuple[str, int]) -> None:
        """Send one datagram.

        Raises:
            TftpIOError: the socket failed
        """

        logger.debug(f"sending {len(buffer)} bytes to {address[0]}:{address[1]}")
        try:
            self.sock.sendto(buffer, address)
        except OSError as err:
            raise TftpIOError(f"Failed sending to {address[0]}:{address[1]}: {err}")

    def receive(self, timeout: float) -> Tuple[bytes, Tuple[str, int]]:
        """Wait up to timeout seconds for a single datagram.

        Args:
            timeout (float): seconds to wait

        Raises:
            TftpTimeout: nothing arrived in time
            TftpIOError: the socket failed

        Returns:
            Tuple[bytes, Tuple[str, int]]: the datagram and its source
        """

        try:
            readable, _, _ = select.select([self.sock], [], [], max(timeout, 0))
            if not readable:
                raise TftpTimeout("Timed-out waiting for traffic")

            buffer, (raddress, rport) = self.sock.recvfrom(RECV_BUFSIZE)
        except OSError as err:
            raise TftpIOError(f"Failed receiving: {err}")

        logger.debug(f"Received {len(buffer)} bytes from {raddress}:{rport}")
        return buffer, (raddress, rport)

    def close(self) -> None:
        """Close the socket, safe to call more than once."""
        if not self.closed:
            logger.debug(f"closing {self}")
            self.sock.close()
