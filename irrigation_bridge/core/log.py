import logging
from logging.handlers import RotatingFileHandler


def configure_logging(log_file: str | None = None) -> None:
    logger = logging.getLogger()
    logger.setLevel(logging.INFO)

    fmt = logging.Formatter(
        "%(asctime)s %(levelname)s %(name)s - %(message)s"
    )

    # Console
    ch = logging.StreamHandler()
    ch.setFormatter(fmt)
    logger.addHandler(ch)

    # Rotating file (avoid filling SD card)
    if log_file:
        fh = RotatingFileHandler(log_file, maxBytes=2_000_000, backupCount=5)
        fh.setFormatter(fmt)
        logger.addHandler(fh)

    # aiomqtt/paho chatter
    logging.getLogger("aiomqtt").setLevel(logging.WARNING)
