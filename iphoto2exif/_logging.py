""" logging setup for iphoto2exif """

import contextlib
import enum
import logging
import warnings

from tqdm import tqdm

LOGGER_NAME = "iphoto2exif"


class LogLevel(enum.IntEnum):
    """ log levels accepted on the command line, in increasing order """

    debug = logging.DEBUG
    info = logging.INFO
    warn = logging.WARNING
    error = logging.ERROR

    @classmethod
    def names(cls):
        return [level.name for level in cls]

    @classmethod
    def from_name(cls, name):
        try:
            return cls[name]
        except KeyError:
            raise ValueError(
                f"Invalid log level '{name}', expected one of {', '.join(cls.names())}"
            ) from None


class TqdmHandler(logging.Handler):
    """ write log records with tqdm.write so they don't break the progress bar """

    def emit(self, record):
        try:
            tqdm.write(self.format(record))
        except Exception:
            self.handleError(record)


class LevelFormatter(logging.Formatter):
    """ format records as "level: message" with the level names of LogLevel """

    _NAMES = {
        logging.DEBUG: LogLevel.debug.name,
        logging.INFO: LogLevel.info.name,
        logging.WARNING: LogLevel.warn.name,
        logging.ERROR: LogLevel.error.name,
        logging.CRITICAL: LogLevel.error.name,
    }

    def format(self, record):
        name = self._NAMES.get(record.levelno, record.levelname.lower())
        return "%5s: %s" % (name, super().format(record))


def setup_logging(level=LogLevel.info):
    """ configure the package logger, returns it """
    level = LogLevel.from_name(level) if isinstance(level, str) else LogLevel(level)
    logger = logging.getLogger(LOGGER_NAME)
    for handler in list(logger.handlers):
        if isinstance(handler, TqdmHandler):
            logger.removeHandler(handler)
    handler = TqdmHandler()
    handler.setFormatter(LevelFormatter("%(message)s"))
    logger.addHandler(handler)
    logger.setLevel(level)
    return logger


@contextlib.contextmanager
def capture_warnings(logger):
    """ send warnings.warn() messages to logger.warning while active """

    def showwarning(message, category, filename, lineno, file=None, line=None):
        logger.warning(str(message).rstrip("\n"))

    saved = warnings.showwarning
    warnings.showwarning = showwarning
    try:
        yield
    finally:
        warnings.showwarning = saved
