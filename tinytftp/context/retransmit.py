import logging
import time

from tinytftp.shared import SOCK_TIMEOUT, TIMEOUT_RETRIES
from tinytftp.exceptions import TftpTimeout, TftpRetriesExhausted

logger = logging.getLogger('tinytftp.context.retransmit')

class Retransmitter:
    """Timeout and retry policy shared by every transfer, whichever side of
    the exchange it is on.

    Each attempt waits up to timeout seconds for a packet that moves the
    transfer forward. On a timeout the last packet sent (request, DAT or ACK)
    is sent again, unchanged. Packets that are dropped by the state, such as
    a stale duplicate, neither use up nor renew an attempt. Fatal conditions
    raised by the state, including an ERR from the peer, are never retried.
    """

    def __init__(self, timeout: float = SOCK_TIMEOUT, retries: int = TIMEOUT_RETRIES) -> None:
        self.timeout = timeout
        self.retries = retries

    def run(self, context: 'Context') -> None:
        """Cycle the context until its state is None.

        Args:
            context (Context): the transfer, with its first packet already sent

        Raises:
            TftpRetriesExhausted: retries consecutive attempts timed out
        """

        context.retry_count = 0
        deadline = time.monotonic() + self.timeout

        while context.state:
            logger.debug(f"State is {context.state}")
            try:
                progressed = context.cycle(deadline - time.monotonic())

            except TftpTimeout:
                context.retry_count += 1
                context.metrics.timeouts += 1

                if context.retry_count >= self.retries:
                    logger.debug("hit max retries, giving up")
                    raise TftpRetriesExhausted(f"No response from {context.host} after "
                                               f"{context.retry_count} attempts")

                logger.warning(f"Timeout waiting for traffic, resending last packet "
                               f"({context.retry_count}/{self.retries})")
                context.state.resend_last()
                deadline = time.monotonic() + self.timeout

            else:
                if progressed:
                    context.retry_count = 0
                    deadline = time.monotonic() + self.timeout
