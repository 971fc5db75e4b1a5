import logging

from typing import Union

from tinytftp.shared import TftpErrors, Phase, DEF_BLKSIZE
from tinytftp.exceptions import (TftpFileError, TftpProtocolError,
                                 TftpRemoteError)
from tinytftp.packet import types

logger = logging.getLogger('tinytftp.states.base')

packet_types = Union[
    types.ReadRQ,
    types.WriteRQ,
    types.Ack,
    types.Data,
    types.Error
]

class TftpState:
    """The base class for the states."""

    # Lifecycle phase of the transfer while in this state.
    phase = Phase.TRANSFERRING

    def __init__(self, context: 'Context') -> None:
        """Constructor for setting up common instance variables. The context
        holds the file object, endpoint and block counter of the transfer."""

        self.context = context

    def __str__(self) -> str:
        return self.__class__.__name__

    def handle(self, pkt: packet_types, raddress: str, rport: int):
        """An abstract method for handling a packet. It is expected to return
        a TftpState object, either itself or a new state, or None once the
        transfer is complete."""

        raise NotImplementedError

    def unexpected(self, pkt: packet_types, doing: str) -> None:
        """Abort on a packet that has no place in the current state. An ERR
        from the peer is surfaced as is, anything else is answered with an
        ERR of our own.

        Raises:
            TftpRemoteError: the peer sent an ERR packet
            TftpProtocolError: any other packet
        """

        if isinstance(pkt, types.Error):
            logger.error(f"Received ERR packet from peer: {pkt}")
            raise TftpRemoteError(pkt.errorcode, pkt.message)

        self.send_error(TftpErrors.ILLEGALTFTPOP)
        raise TftpProtocolError(f"Received {pkt} from peer while {doing}",
                                error_code=TftpErrors.ILLEGALTFTPOP)

    def send_dat(self) -> bool:
        """This method reads the next block from the file and sends it as the
        DAT packet for the context's next_block.

        Raises:
            TftpFileError: the file couldn't be read

        Returns:
            bool: Indicates whether this was the final, short, block
        """

        blocknumber = self.context.next_block

        try:
            buffer = self.context.fileobj.read(DEF_BLKSIZE)
        except OSError as err:
            self.send_error(TftpErrors.NOTDEFINED, "Read error")
            raise TftpFileError(f"Could not read {self.context.file_to_transfer}: {err}")

        logger.debug(f"Read {len(buffer)} bytes into buffer")
        finished = len(buffer) < DEF_BLKSIZE
        if finished:
            logger.info(f"Reached EOF on file {self.context.file_to_transfer}")

        dat = types.Data(blocknumber, buffer)
        self.context.metrics.bytes += len(dat.data)
        self.context.metrics.blocks += 1
        logger.debug(f"Sending DAT packet {dat.blocknumber}")
        self.context.send(dat)
        self.context.last_pkt = dat

        if self.context.packethook:
            self.context.packethook(dat)

        return finished

    def send_ack(self, blocknumber: int) -> None:
        """This method sends an ack packet to the block number specified.

        Args:
            blocknumber (int): Block number to acknowledge
        """

        logger.info(f"Sending ack to block {blocknumber}")
        ackpkt = types.Ack(blocknumber)
        self.context.send(ackpkt)
        self.context.last_pkt = ackpkt

    def send_error(self, errorcode: int, errmsg: str = None) -> None:
        """Compose and send an error packet to the peer. It is not recorded
        as the last packet, an ERR is never retransmitted.

        Args:
            errorcode (int): The error code to respond with. Details can be found in
            shared.TftpErrors
            errmsg (str, optional): Message, defaults to the standard text of the code
        """

        logger.debug(f"In send_error, being asked to send error {errorcode}")
        self.context.send(types.Error(errorcode, errmsg))

    def resend_last(self) -> None:
        """Resend the last sent packet due to a timeout."""

        logger.warning(f"Resending packet {self.context.last_pkt} on session {self.context}")
        self.context.send(self.context.last_pkt)
        self.context.metrics.add_resend(self.context.last_pkt)

    def handle_dat(self, pkt: types.Data) -> Union['ExpectData', 'TftpState', None]:
        """This method handles a DAT packet during a client download, or a
        server upload. Only the expected block is written and acknowledged,
        any other block number is dropped.

        Args:
            pkt (types.Data): Data packet to handle

        Raises:
            TftpFileError: the block couldn't be written

        Returns:
            ExpectData, TftpState, None: ExpectData after a full block, self
                when the packet was dropped, None after the final block
        """

        logger.info(f"Handling DAT packet - block {pkt.blocknumber}")
        logger.debug(f"Expecting block {self.context.next_block}")

        if pkt.blocknumber != self.context.next_block:
            logger.warning(f"Discarding DAT block {pkt.blocknumber}, expected "
                           f"{self.context.next_block}")
            self.context.metrics.add_discard(pkt)
            return self

        logger.debug(f"Writing {len(pkt.data)} bytes to output file")
        try:
            self.context.fileobj.write(pkt.data)
        except OSError as err:
            self.send_error(TftpErrors.DISKFULL)
            raise TftpFileError(f"Could not write {self.context.file_to_transfer}: {err}")

        self.context.metrics.bytes += len(pkt.data)
        self.context.metrics.blocks += 1
        if self.context.packethook:
            self.context.packethook(pkt)

        self.send_ack(pkt.blocknumber)
        self.context.next_block += 1

        # Check for end-of-file, any less than full data packet.
        if len(pkt.data) < DEF_BLKSIZE:
            logger.info("End of file detected")
            return None

        return ExpectData(self.context)


class ExpectData(TftpState):
    """Just sent an ACK packet. Waiting for DAT."""

    def handle(self, pkt: packet_types, raddress: str, rport: int) -> Union['ExpectData', None]:
        """Handle the packet in response to an ACK, which should be a DAT.

        Args:
            pkt (packet_types): Expected Data packet any other will raise a Error

        Raises:
            TftpRemoteError: Error packet received
            TftpProtocolError: Invalid Packet Type received

        Returns:
            ExpectData: Return next state class, either ExpectData or None if we received a short packet
        """

        if isinstance(pkt, types.Data):
            return self.handle_dat(pkt)

        self.unexpected(pkt, "expecting DAT")
