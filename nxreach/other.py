"""Package-wide console logging."""
import logging


# Set up console logging for the package
logger = logging.getLogger("nxreach")
handler = logging.StreamHandler()
handler.setFormatter(logging.Formatter('%(levelname)s - %(message)s'))
logger.addHandler(handler)
logger.setLevel(logging.INFO)


def set_log_level(level) -> None:
    """
    Changes the verbosity of the package logger.

    Parameters
    ----------
    level : int or str
        Any level accepted by ``logging.Logger.setLevel``, e.g. ``"DEBUG"``.
    """
    logger.setLevel(level)
