from datetime import datetime
import logging
import sys
import traceback

"""

Meower Utils Module
This module provides logging, error traceback, and other miscellaneous utilities.

This file should never rely on other meower modules to prevent circular imports.
"""

logger = logging.getLogger("meower")


def full_stack():
    """
    Render the full traceback of the exception being handled (or the current stack).
    """

    exc = sys.exc_info()[0]
    if exc is not None:
        f = sys.exc_info()[-1].tb_frame.f_back
        stack = traceback.extract_stack(f)
    else:
        stack = traceback.extract_stack()[:-1]
    trc = 'Traceback (most recent call last):\n'
    stackstr = trc + ''.join(traceback.format_list(stack))
    if exc is not None:
        stackstr += '  ' + traceback.format_exc().lstrip(trc)
    return stackstr

def log(event: str, level: int = logging.INFO):
    """
    Log an event with the current date & time through the "meower" logger.
    """

    logger.log(level, "{0}: {1}".format(datetime.now().strftime("%m/%d/%Y %H:%M.%S"), event))
