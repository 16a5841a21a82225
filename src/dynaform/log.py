import copy
import logging.config

from .consts import LOG_FILE_DEFAULT
from .utils import canonicalify, ensure_path

LOGGING_CONFIG = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "default": {
            "format": "%(asctime)s [%(levelname)s] [%(name)s] - %(message)s"
        },
    },
    "handlers": {
        "console": {
            "class": "logging.StreamHandler",
            "level": logging.INFO,
            "formatter": "default",
            "stream": "ext://sys.stderr",
        },
        "file": {
            "class": "logging.handlers.RotatingFileHandler",
            "level": logging.DEBUG,
            "formatter": "default",
            "filename": LOG_FILE_DEFAULT,
            "maxBytes": 5 * 1024 * 1024,  # 5MB
            "backupCount": 10,
        },
    },
    "loggers": {
        "dynaform": {
            "handlers": ["console"],
            "level": logging.DEBUG,
            "propagate": True,
        }
    },
}


def setup(logfile=None, level=logging.INFO):
    """Configure the ``dynaform`` logger.

    Console output always goes to stderr so command output on stdout stays
    machine readable. The rotating file handler is only attached when a
    log file is given.
    """
    config = copy.deepcopy(LOGGING_CONFIG)
    config["handlers"]["console"]["level"] = level

    if logfile:
        p = canonicalify(logfile)
        ensure_path(p.parent)
        config["handlers"]["file"]["filename"] = str(p)
        config["loggers"]["dynaform"]["handlers"].append("file")
    else:
        del config["handlers"]["file"]

    logging.config.dictConfig(config)
    return config
