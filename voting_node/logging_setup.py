import logging

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def configure_logging(level: str = "INFO") -> None:
    root = logging.getLogger()
    lvl = getattr(logging, str(level).upper(), logging.INFO)
    if not root.handlers:
        logging.basicConfig(level=lvl, format=LOG_FORMAT)
    logging.getLogger("voting_node").setLevel(lvl)
