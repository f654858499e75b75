# Author      : Tyson Limato
# Date        : 2025-7-2
# File Name   : errors.py


class PiRunError(Exception):
    """
    Base class for every error raised by the parallel pi run.

    Never raised directly; catch it to handle any failure of the group in a
    single `except` clause. All of these errors are fatal for the whole group.

    Parameters:
    -----------
    msg : str
        Error message describing the cause.
    obj : object
        Optional object on whose activity the error was raised.
    """

    def __init__(self, msg, obj=None):
        Exception.__init__(self, msg)
        self._obj = obj
        self.message = msg

    def get_object(self):
        """Return the object on whose activity the error was raised."""
        return self._obj

    def get_message(self):
        """Return the error message."""
        return self.message


class GroupInitializationError(PiRunError):
    """The worker group could not agree on a consistent rank/size."""


class CollectiveMismatchError(PiRunError):
    """A broadcast or reduce observed inconsistent participation or data."""
