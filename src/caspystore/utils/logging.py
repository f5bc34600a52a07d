"""
Configuração de logging do CaspyStore.
"""

import logging
import os
from typing import Optional, Union

LOGGER_NAME = "caspystore"
DEFAULT_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"

_configured = False


def setup_logging(level: Optional[Union[int, str]] = None, fmt: str = DEFAULT_FORMAT) -> logging.Logger:
    """
    Configura o logger raiz do pacote ``caspystore``.

    O nível vem do argumento, de CASPY_LOG_LEVEL ou, por fim, WARNING.
    Chamadas repetidas só ajustam o nível; o handler é instalado uma vez.
    """
    global _configured

    if level is None:
        level = os.getenv("CASPY_LOG_LEVEL", "WARNING")
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.WARNING

    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(level)

    if not _configured:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(fmt))
        logger.addHandler(handler)
        _configured = True

    return logger


def get_logger(name: str) -> logging.Logger:
    """Retorna um logger filho de ``caspystore``."""
    if name == LOGGER_NAME or name.startswith(LOGGER_NAME + "."):
        return logging.getLogger(name)
    return logging.getLogger(f"{LOGGER_NAME}.{name}")
