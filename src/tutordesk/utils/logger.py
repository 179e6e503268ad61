"""
Logging utilities with masking of personal data.

This module provides logging setup with:
- Configurable log level and optional rotating log file
- Masking of meeting-link passcodes and e-mail addresses
- Structured log format
"""

import logging
import re
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional


_EMAIL_PATTERN = re.compile(r'([A-Za-z0-9._%+-])[A-Za-z0-9._%+-]*@([A-Za-z0-9.-]+\.[A-Za-z]{2,})')
_PASSCODE_PATTERN = re.compile(
    r'\b(pwd|passcode|password|pass)=([^&\s"\']+)',
    flags=re.IGNORECASE
)


def mask_email(email: str) -> str:
    """
    Mask an e-mail address for safe logging.

    Examples:
        >>> mask_email("teacher@example.com")
        't***@example.com'
        >>> mask_email("invalid")
        '***'
    """
    if not email or "@" not in email:
        return "***"

    local, domain = email.split("@", 1)
    masked_local = local[0] + "***" if local else "***"
    return f"{masked_local}@{domain}"


def mask_meeting_link(link: str) -> str:
    """
    Hide the passcode query parameter of an online meeting link.

    Examples:
        >>> mask_meeting_link("https://zoom.us/j/123?pwd=abc")
        'https://zoom.us/j/123?pwd=********'
    """
    return _PASSCODE_PATTERN.sub(r'\1=********', link or "")


class SensitiveDataFilter(logging.Filter):
    """
    Logging filter that masks personal data before output.

    Meeting links copied onto sessions often embed a passcode, and
    teacher contact strings are usually e-mail addresses; both end up
    in debug logs of store mutations.
    """

    def filter(self, record: logging.LogRecord) -> bool:
        message = record.getMessage()
        masked = _PASSCODE_PATTERN.sub(r'\1=********', message)
        masked = _EMAIL_PATTERN.sub(r'\1***@\2', masked)

        if masked != message:
            record.msg = masked
            record.args = None

        return True


def setup_logger(
    name: str = "tutordesk",
    level: int = logging.INFO,
    log_file: Optional[str] = None
) -> logging.Logger:
    """
    Set up and configure a logger instance.

    Args:
        name: Logger name (default: "tutordesk")
        level: Logging level (default: logging.INFO)
        log_file: Optional path to log file for file output

    Returns:
        Configured logger instance

    Examples:
        >>> logger = setup_logger()
        >>> logger.info("Store ready")

        >>> logger = setup_logger(
        ...     level=logging.DEBUG,
        ...     log_file="~/.tutordesk/logs/tutordesk.log"
        ... )
    """
    logger = logging.getLogger(name)

    # Avoid duplicate handlers
    if logger.handlers:
        return logger

    logger.setLevel(level)

    formatter = logging.Formatter(
        fmt='%(asctime)s [%(levelname)s] %(name)s:%(funcName)s:%(lineno)d %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )

    console_handler = logging.StreamHandler()
    console_handler.setFormatter(formatter)
    console_handler.addFilter(SensitiveDataFilter())
    logger.addHandler(console_handler)

    if log_file:
        log_path = Path(log_file).expanduser()
        log_path.parent.mkdir(parents=True, exist_ok=True)

        file_handler = RotatingFileHandler(
            log_path,
            maxBytes=10 * 1024 * 1024,  # 10MB
            backupCount=5,
            encoding='utf-8'
        )
        file_handler.setFormatter(formatter)
        file_handler.addFilter(SensitiveDataFilter())
        logger.addHandler(file_handler)

    return logger
