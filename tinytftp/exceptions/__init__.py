from .exceptions import (TftpException, TftpIOError, TftpFileError,
                         TftpFileNotFoundError, TftpDecodeError,
                         TftpProtocolError, TftpTimeout, TftpRetriesExhausted,
                         TftpRemoteError)
