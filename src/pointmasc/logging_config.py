"""
Konfiguracja logowania dla aplikacji korzystajacych z pointmasc

Biblioteka sama nie dodaje handlerow - robi to aplikacja przez setup_logging().
"""

import logging
import sys
from typing import Optional


def setup_logging(
    level: int = logging.INFO,
    verbose: bool = False,
    log_file: Optional[str] = None
) -> logging.Logger:
    """
    Konfiguruje logger przestrzeni nazw 'pointmasc'

    Args:
        level: poziom logowania (np. logging.DEBUG)
        verbose: pelny format z nazwa modulu
        log_file: opcjonalna sciezka do pliku logu

    Returns:
        skonfigurowany logger pakietu
    """
    logger = logging.getLogger("pointmasc")
    logger.setLevel(level)

    # Unikaj zdublowanych logow przy ponownym wywolaniu
    if logger.hasHandlers():
        logger.handlers.clear()

    if verbose:
        fmt = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    else:
        fmt = '%(asctime)s - %(levelname)s - %(message)s'
    formatter = logging.Formatter(fmt)

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(level)
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    if log_file:
        file_handler = logging.FileHandler(log_file, mode='w', encoding='utf-8')
        file_handler.setLevel(level)
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    return logger
