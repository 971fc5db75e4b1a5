import logging

from tinytftp.states.base import TftpState
from tinytftp.exceptions import TftpProtocolError
from tinytftp.packet import types
from tinytftp.shared import TftpErrors, MAX_BLOCKNUMBER

logger = logging.getLogger('tinytftp.states.states.acknowledge')

class ExpectAck(TftpState):
    """This class represents the state of the transfer when a DAT was just
    sent, and we are waiting for an ACK from the peer. This class is the
    same one used by the client during the upload, and the server during the
    download."""

    def handle(self, pkt, raddress, rport):
        "Handle a packet, hopefully an ACK since we just sent a DAT."

        if not isinstance(pkt, types.Ack):
            self.unexpected(pkt, "expecting ACK")

        logger.debug(f"Received ACK for packet {pkt.blocknumber}")

        # Is this an ack to the one we just sent?
        if self.context.next_block == pkt.blocknumber:
            if self.context.pending_complete:
                logger.info("Received ACK to final DAT, we're done.")
                return None

            logger.debug("Good ACK, sending next DAT")
            self.context.next_block += 1
            logger.debug(f"Incremented next_block to {self.context.next_block}")
            self.context.pending_complete = self.send_dat()

        elif pkt.blocknumber == (self.context.next_block - 1) % MAX_BLOCKNUMBER:
            logger.warning(f"Received duplicate ACK for block {pkt.blocknumber}, discarding")
            self.context.metrics.add_discard(pkt)

        else:
            self.send_error(TftpErrors.ILLEGALTFTPOP, "Unexpected block number")
            raise TftpProtocolError(f"Received ACK for block {pkt.blocknumber} but "
                                    f"expected {self.context.next_block}",
                                    error_code=TftpErrors.ILLEGALTFTPOP)

        return self
