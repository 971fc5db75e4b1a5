import logging

from tinytftp.packet import types
from tinytftp.shared import TftpErrors, Phase
from tinytftp.states.base import TftpState
from tinytftp.exceptions import TftpProtocolError
from .acknowledge import ExpectAck

logger = logging.getLogger('tinytftp.states.states.request')

class SentWriteRQ(TftpState):
    """Just sent an WRQ packet for an upload."""

    phase = Phase.REQUEST_SENT

    def handle(self, pkt, raddress, rport):
        """Handle a packet we just received. Only an ACK to block zero lets
        the upload begin."""

        if not isinstance(pkt, types.Ack):
            self.unexpected(pkt, "waiting for the WRQ to be acknowledged")

        logger.info("Received ACK from server")
        if pkt.blocknumber != 0:
            self.send_error(TftpErrors.ILLEGALTFTPOP, "Unexpected block number")
            raise TftpProtocolError(f"Received ACK to block {pkt.blocknumber} in reply to WRQ",
                                    error_code=TftpErrors.ILLEGALTFTPOP)

        logger.debug("Sending first DAT packet")
        self.context.next_block = 1
        self.context.pending_complete = self.send_dat()
        logger.debug("Changing state to ExpectAck")
        return ExpectAck(self.context)

class SentReadRQ(TftpState):
    """Just sent an RRQ packet."""

    phase = Phase.REQUEST_SENT

    def handle(self, pkt, raddress, rport):
        """Handle the packet in response to an RRQ to the server, which
        should be the first DAT."""

        if isinstance(pkt, types.Data):
            logger.info("Received DAT from server")
            return self.handle_dat(pkt)

        self.unexpected(pkt, "waiting for the first DAT")
