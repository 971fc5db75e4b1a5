import logging
import time

logger = logging.getLogger('tinytftp.context.metrics.base')

class Metrics:
    """A class representing metrics of the transfer."""

    def __init__(self) -> None:
        # Payload bytes transferred
        self.bytes = 0
        # DAT blocks transferred
        self.blocks = 0
        # Bytes re-sent
        self.resent_bytes = 0
        self.resent_packets = 0
        self.timeouts = 0
        # Packets dropped without changing the transfer state
        self.discarded = 0
        # Times
        self.start_time = 0
        self.end_time = 0
        self.duration = 0
        # Rates
        self.bps = 0
        self.kbps = 0

    def start(self) -> None:
        self.start_time = time.time()
        logger.debug(f"Set metrics.start_time to {self.start_time}")

    def add_resend(self, pkt: 'TftpPacket') -> None:
        self.resent_packets += 1
        self.resent_bytes += len(pkt.buffer)

    def add_discard(self, pkt: 'TftpPacket') -> None:
        logger.debug(f"Recording a discard of {pkt}")
        self.discarded += 1

    def compute(self) -> None:
        """Compute transfer time

           Sets:
               duration: Time taken for the transfer
               bps: Speed in bits per seconds
               kbps: Speed in kbps
        """

        self.end_time = time.time()
        self.duration = self.end_time - self.start_time if self.start_time else 0

        logger.debug(f"Metrics.compute: duration is {self.duration}")
        if self.duration > 0:
            self.bps = (self.bytes * 8.0) / self.duration
            self.kbps = self.bps / 1024.0
        logger.debug(f"Metrics.compute: kbps is {self.kbps}")

    def log_summary(self, log: logging.Logger, verb: str) -> None:
        """Report the transfer on the given logger."""

        if self.duration == 0:
            log.info("Duration too short, rate undetermined")
        else:
            log.info(f"{verb} {self.bytes} bytes in {self.duration:.2f} seconds")
            log.info(f"Average rate: {self.kbps:.2f} kbps")
        log.info(f"{self.resent_bytes} bytes in resent data")
        log.info(f"{self.resent_packets} packets resent, {self.discarded} packets discarded")
