# -*- coding: utf-8 -*-
"""
Configuração de logging da engine de timeline
"""

import logging
import sys
from typing import Optional

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def setup_logging(
    log_file: Optional[str] = "timeline_engine.log",
    level: int = logging.INFO,
    console_level: int = logging.WARNING,
) -> logging.Logger:
    """Configura o sistema de logging"""

    formatter = logging.Formatter(LOG_FORMAT)
    root_logger = logging.getLogger()
    root_logger.setLevel(level)

    # Evita handlers duplicados quando chamado mais de uma vez (CLI + testes)
    for handler in list(root_logger.handlers):
        if getattr(handler, "_timeline_engine", False):
            root_logger.removeHandler(handler)
            handler.close()

    handlers = []
    if log_file:
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setLevel(level)
        handlers.append(file_handler)

    # Só warnings e erros no console por padrão
    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(console_level)
    handlers.append(console_handler)

    for handler in handlers:
        handler.setFormatter(formatter)
        handler._timeline_engine = True
        root_logger.addHandler(handler)

    return root_logger


def get_logger(name: str) -> logging.Logger:
    """Obtém um logger com o nome especificado"""
    return logging.getLogger(name)
