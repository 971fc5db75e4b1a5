from .server import Start, ReceiveReadRQ, ReceiveWriteRQ
