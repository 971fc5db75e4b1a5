from .acknowledge import ExpectAck
from .request import SentWriteRQ, SentReadRQ
