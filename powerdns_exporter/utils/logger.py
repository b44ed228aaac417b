#!/usr/bin/env python3
"""
Logger Utility - Centralized logging configuration
"""

import logging
import logging.handlers
from pathlib import Path
from typing import Dict, Optional
import sys

from powerdns_exporter.utils.config import Config

_loggers: Dict[str, logging.Logger] = {}


def get_logger(name: str, log_file: Optional[str] = None, level: Optional[str] = None) -> logging.Logger:
    """
    Get or create logger
    
    Args:
        name: Logger name (usually __name__)
        log_file: Optional log file path, defaults to Config.LOG_FILE
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    
    Returns:
        Configured logger instance
    """
    if name in _loggers:
        return _loggers[name]
    
    level = (level or Config.LOG_LEVEL).upper()
    log_file = log_file if log_file is not None else Config.LOG_FILE
    
    logger = logging.getLogger(name)
    logger.setLevel(getattr(logging, level, logging.INFO))
    
    # Console handler
    console_handler = logging.StreamHandler(sys.stdout)
    
    # Format
    formatter = logging.Formatter(Config.LOG_FORMAT, datefmt='%Y-%m-%d %H:%M:%S')
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)
    
    # File handler if specified
    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        
        file_handler = logging.handlers.RotatingFileHandler(
            log_path,
            maxBytes=Config.LOG_MAX_BYTES,
            backupCount=Config.LOG_BACKUP_COUNT
        )
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)
    
    _loggers[name] = logger
    return logger


def set_level(level: str):
    """Change the level of every logger handed out so far"""
    for logger in _loggers.values():
        logger.setLevel(getattr(logging, level.upper(), logging.INFO))
