from contextlib import contextmanager
import sys
import traceback
import services.logger as log

l = log.get_logger()


class AttachmentError(Exception):
    """Base class for errors raised while preparing message attachments."""


class FileReadError(AttachmentError):
    """A selected file could not be opened, downloaded or read at all."""


def _handle_uncaught_exceptions(exc_type, exc_value, exc_traceback):
    """Global exception handler for uncaught exceptions."""
    if issubclass(exc_type, KeyboardInterrupt):
        # Default handler for Ctrl+C
        sys.__excepthook__(exc_type, exc_value, exc_traceback)
        return

    l.critical(
        "Unhandled exception caught:\n"
        + ''.join(traceback.format_exception(exc_type, exc_value, exc_traceback))
    )


def install_excepthook():
    """Route uncaught exceptions through the application logger."""
    sys.excepthook = _handle_uncaught_exceptions


def raise_and_log(message: str, exception_type: type = AttachmentError):
    """
    Log an error and then raise the specified exception.

    :param message: Error message to log and include in the exception.
    :param exception_type: Type of exception to raise (default: AttachmentError).
    """
    l.error(f"Raising exception: {message}")
    raise exception_type(message)


@contextmanager
def catch_and_log(context_info: str = ""):
    """
    Log any exception raised inside the block, then re-raise it.

    :param context_info: Optional context info to include in the log.
    """
    try:
        yield
    except Exception as e:
        l.error(f"Exception caught in context '{context_info}': {e}")
        raise
