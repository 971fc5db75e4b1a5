import logging
import socket

from tinytftp.shared import (SOCK_TIMEOUT, TIMEOUT_RETRIES, DEF_TFTP_PORT,
                             MAX_BLOCKNUMBER, TftpErrors, Phase, TransferId)
from tinytftp.exceptions import (TftpException, TftpIOError, TftpDecodeError,
                                 TftpProtocolError)
from tinytftp.packet.factory import PacketFactory
from tinytftp.packet import types
from tinytftp.transport import UdpEndpoint
from .metrics import Metrics
from .retransmit import Retransmitter

logger = logging.getLogger('tinytftp.context.base')

class Context:
    """The base class of the contexts. A context is one transfer: it owns
    the endpoint and the file object until end() is called, which the
    context manager protocol guarantees."""

    def __init__(self, host, port, timeout=SOCK_TIMEOUT, **kwargs):
        """Constructor for the base context, setting shared instance
        variables.

        Args:
            host (str): Host address or name of the peer
            port (int): tftp port of the peer
            timeout (float): seconds to wait for each reply

        kwargs:
            filename (str): Filename to send or receive
            fileobj (class): File-like object supporting .read or .write
            packethook (func): function to receive a copy of each Data Packet
            localip (str, optional): Listen Address. Defaults to None.
            retries (int): attempts before giving up on a packet

        Raises:
            TftpIOError: the host can't be resolved or the socket can't be created
            ValueError: invalid port
        """

        if port == 0:
            # if the port is 0 set to the default TFTP port (69)
            port = DEF_TFTP_PORT
        if not 0 < int(port) < 65536:
            raise ValueError("port must be between 1 and 65535")
        self.port = int(port)

        # Note, setting the host will also set self.address, as it's a property.
        self.host = host

        self.file_to_transfer = kwargs.get('filename', None)
        self.fileobj = kwargs.get('fileobj', None)
        self.packethook = kwargs.get('packethook', None)
        self.retries = kwargs.get('retries', TIMEOUT_RETRIES)
        self.timeout = timeout
        self.endpoint = UdpEndpoint(kwargs.get('localip', None))

        # Whether end() should close fileobj.
        self.owns_fileobj = False
        self.phase = Phase.IDLE
        self.__state = None
        self.next_block = 0
        self.factory = PacketFactory()
        # The remote end of the session, fixed by the first packet received.
        self.peer = None
        self.metrics = Metrics()
        # Flag when the transfer is pending completion.
        self.pending_complete = False
        # The last packet we sent, if applicable, to make resending easy.
        self.last_pkt = None
        # Count the number of retry attempts.
        self.retry_count = 0
        self.ended = False

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_value, traceback):
        if exc_type is not None and self.phase != Phase.COMPLETED:
            self.phase = Phase.ABORTED
        self.end()

    def __str__(self):
        return f"{self.host}:{self.port} {self.state}"

    @property
    def host(self):
        "Get the host address or name"

        return self.__host

    @host.setter
    def host(self, host):
        """Sets the address property as a result of the host that is set."""

        try:
            self.address = socket.gethostbyname(host)
        except OSError as err:
            raise TftpIOError(f"Could not resolve {host}: {err}")
        self.__host = host

    @property
    def next_block(self):
        """Gets the next_block"""
        return self.__eblock

    @next_block.setter
    def next_block(self, block):
        """Sets the next block or rolls over if greater than 2^16 blocks"""

        if block >= MAX_BLOCKNUMBER:
            logger.debug("Block number rollover to 0 again")
            block = 0
        self.__eblock = block

    @property
    def state(self):
        return self.__state

    @state.setter
    def state(self, state):
        """Sets the state and the phase of the transfer that comes with it."""

        self.__state = state
        if state is not None:
            self.phase = state.phase
        elif self.phase in (Phase.REQUEST_SENT, Phase.TRANSFERRING):
            self.phase = Phase.COMPLETED

    def start(self):
        raise NotImplementedError

    def transfer(self):
        """Drive the current state until the transfer completes.

        Raises:
            TftpException: the transfer was aborted
        """

        try:
            Retransmitter(self.timeout, self.retries).run(self)
        except TftpException as err:
            self.phase = Phase.ABORTED
            logger.error(f"Transfer with {self.host} aborted: {err}")
            raise

    def end(self, close_fileobj=True):
        """Perform session cleanup. This is safe to call more than once,
        only the first call has any effect.

        Set close_fileobj to False so fileobj can be returned open.

        Args:
            close_fileobj (bool, optional): close the file object if this context opened it. Defaults to True.
        """

        if self.ended:
            return
        self.ended = True

        logger.debug("in Context.end - closing socket")
        self.endpoint.close()
        if close_fileobj and self.owns_fileobj and self.fileobj is not None and not self.fileobj.closed:
            logger.debug("self.fileobj is open - closing")
            self.fileobj.close()

        self.metrics.compute()

    def send(self, pkt, address=None):
        """Encode a packet and send it to the peer, or to the address given.

        Args:
            pkt (class): tinytftp.packet.types class
            address (tuple, optional): (address, port), defaults to the peer
        """

        if address is None:
            address = self.peer or (self.address, self.port)

        self.endpoint.send_to(pkt.encode().buffer, address)

    def accept_peer(self, raddress, rport):
        """Check the source of a datagram against the transfer id of the
        session. The first packet from the expected host fixes the peer.

        Returns:
            bool: the datagram belongs to this session
        """

        if self.peer is None:
            if raddress != self.address:
                logger.warning(f"Received traffic from {raddress}, expected host {self.host}. Discarding")
                return False

            self.peer = TransferId(raddress, rport)
            logger.info(f"Set remote port for session to {rport}")
            return True

        if (raddress, rport) != self.peer:
            logger.warning(f"Received traffic from {raddress}:{rport} but we're connected to "
                           f"{self.peer.address}:{self.peer.port}. Discarding.")
            self.send(types.Error(TftpErrors.UNKNOWNTID), (raddress, rport))
            return False

        return True

    def cycle(self, timeout):
        """Here we wait for a response from the peer after sending it
        something, and dispatch appropriate action to that response.

        Args:
            timeout (float): seconds to wait for the datagram

        Raises:
            TftpTimeout: nothing arrived in time
            TftpProtocolError: the datagram couldn't be decoded

        Returns:
            bool: whether the packet moved the transfer forward
        """

        buffer, (raddress, rport) = self.endpoint.receive(timeout)

        if not self.accept_peer(raddress, rport):
            self.metrics.discarded += 1
            return False

        try:
            recvpkt = self.factory.parse(buffer)
        except TftpDecodeError as err:
            self.send(types.Error(TftpErrors.ILLEGALTFTPOP))
            raise TftpProtocolError(f"Malformed packet from peer: {err}",
                                    error_code=TftpErrors.ILLEGALTFTPOP)

        logger.debug(f"Received {recvpkt}")

        # And handle it, possibly changing state.
        before = (self.state, self.next_block)
        self.state = self.state.handle(recvpkt, raddress, rport)
        return (self.state, self.next_block) != before
