"""Command line front ends for the client and the server."""

import logging

def setup_logging(debug: bool, quiet: bool) -> logging.Logger:
    """Attach a console handler to the package logger."""

    log = logging.getLogger('tinytftp')
    log.setLevel(logging.INFO)

    # console handler, replacing one from an earlier call
    for old in list(log.handlers):
        log.removeHandler(old)
    handler = logging.StreamHandler()
    handler.setLevel(logging.DEBUG)
    handler.setFormatter(logging.Formatter('[%(asctime)s] %(message)s'))
    log.addHandler(handler)

    if debug:
        log.setLevel(logging.DEBUG)
        # increase the verbosity of the formatter
        debug_formatter = logging.Formatter('[%(asctime)s%(msecs)03d] %(levelname)s [%(name)s:%(lineno)s] %(message)s')
        handler.setFormatter(debug_formatter)
    elif quiet:
        log.setLevel(logging.WARNING)

    return log
