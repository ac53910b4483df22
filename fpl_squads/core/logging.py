# fpl_squads/core/logging.py
import logging

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(level=getattr(logging, level, logging.INFO), format=LOG_FORMAT)
    # uvicorn access lines already cover request logging
    logging.getLogger("urllib3").setLevel(logging.WARNING)
