from __future__ import annotations

import logging

_CONFIGURED = False

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def configure_logging(level: str = "INFO") -> None:
    global _CONFIGURED
    if _CONFIGURED:
        logging.getLogger("docintel").setLevel(level)
        return
    logging.basicConfig(level=level, format=LOG_FORMAT)
    logging.getLogger("docintel").setLevel(level)
    _CONFIGURED = True
