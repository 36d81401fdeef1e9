import logging
import sys

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s - %(message)s"


def setup_logging(level="INFO") -> None:
    logger = logging.getLogger()
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
    logger.setLevel(level)
    if any(getattr(h, "_prompt_studio", False) for h in logger.handlers):
        return  # already configured by an earlier create_app()
    h = logging.StreamHandler(sys.stdout)
    h.setFormatter(logging.Formatter(LOG_FORMAT))
    h._prompt_studio = True
    logger.addHandler(h)
