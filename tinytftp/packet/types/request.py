from .base import TftpPacketInitial

class ReadRQ(TftpPacketInitial):
    """
    Read Request
          2 bytes    string    1 byte    string    1 byte
          -----------------------------------------------
    RRQ  |  01   |  Filename  |   0  |    Mode    |   0  |
          -----------------------------------------------
    """

    name = "RRQ"

    def __init__(self, *args, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self.opcode = 1

class WriteRQ(TftpPacketInitial):
    """
    Write Request
          2 bytes    string    1 byte    string    1 byte
          -----------------------------------------------
    WRQ  |  02   |  Filename  |   0  |    Mode    |   0  |
          -----------------------------------------------
    """

    name = "WRQ"

    def __init__(self, *args, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self.opcode = 2
