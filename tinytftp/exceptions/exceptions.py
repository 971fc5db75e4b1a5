from tinytftp.shared import TftpErrors

class TftpException(Exception):
    """This class is the parent class of all exceptions regarding the handling
    of the TFTP protocol."""

    error_code = None

    def __init__(self, message, *args, error_code=None, **kwargs):
        if isinstance(error_code, int):
            self.error_code = error_code

        super().__init__(message, *args, **kwargs)

class TftpIOError(TftpException):
    """A socket operation failed."""
    pass

class TftpFileError(TftpException):
    """The local file could not be opened, read or written."""
    pass

class TftpFileNotFoundError(TftpFileError):
    """This class represents an error condition where the file to transfer
    does not exist, locally or on the server."""
    error_code = TftpErrors.FILENOTFOUND

class TftpDecodeError(TftpException):
    """A buffer could not be decoded into a packet."""
    error_code = TftpErrors.ILLEGALTFTPOP

class TftpProtocolError(TftpException):
    """The peer broke the lock-step exchange: an unexpected opcode, an
    unexpected block number or a malformed packet."""
    pass

class TftpTimeout(TftpException):
    """This class represents a timeout error waiting for a response from the
    other end."""
    pass

class TftpRetriesExhausted(TftpTimeout):
    """Every retransmission of the last packet went unanswered."""
    pass

class TftpRemoteError(TftpException):
    """The peer sent an ERROR packet."""

    def __init__(self, error_code, errmsg):
        self.errmsg = errmsg
        super().__init__(f"Received ERR from peer: code {error_code}: {errmsg}",
                         error_code=error_code)
