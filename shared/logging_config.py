"""
Root logger setup for the dashboard process.

The Flask service and the helper scripts all log through the root logger, one
line per record, tagged with the component that installed it. Calling
setup_logging again (tests, app reloads) replaces the handlers rather than
stacking duplicates.
"""

import logging
import sys
from pathlib import Path
from typing import List, Optional, Union

DATE_FORMAT = '%Y-%m-%d %H:%M:%S'

# requests logs every connection at DEBUG through these
NOISY_LOGGERS = ("urllib3",)


def resolve_level(level: Union[int, str, None]) -> int:
    """Map 'debug', 'INFO ', 10 ... to a logging level; unknown names mean INFO."""
    if isinstance(level, int):
        return level
    resolved = logging.getLevelName(str(level or "").strip().upper())
    return resolved if isinstance(resolved, int) else logging.INFO


def _build_handlers(log_file: Optional[str], formatter: logging.Formatter) -> List[logging.Handler]:
    handlers: List[logging.Handler] = [logging.StreamHandler(sys.stdout)]
    if log_file:
        Path(log_file).parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(log_file))
    for handler in handlers:
        handler.setFormatter(formatter)
    return handlers


def setup_logging(
    component_name: str,
    level=logging.INFO,
    log_file: Optional[str] = None,
    format_string: Optional[str] = None
) -> logging.Logger:
    """
    Point the root logger at stdout (and optionally a file) for one component.

    Args:
        component_name: Tag printed on every line, e.g. 'dashboard'
        level: Threshold as a level number or name; LOG_LEVEL feeds this
        log_file: Extra destination; parent directories are created
        format_string: Replaces the default '[time] [COMPONENT] LEVEL logger - msg'

    Returns:
        The component's own logger
    """
    level = resolve_level(level)
    if format_string is None:
        format_string = f'[%(asctime)s] [{component_name.upper()}] %(levelname)s %(name)s - %(message)s'
    formatter = logging.Formatter(format_string, datefmt=DATE_FORMAT)

    logging.basicConfig(level=level, handlers=_build_handlers(log_file, formatter), force=True)

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(max(level, logging.WARNING))

    logger = logging.getLogger(component_name)
    logger.info(f"Logging for {component_name} at {logging.getLevelName(level)}"
                + (f", also writing to {log_file}" if log_file else ""))
    return logger
