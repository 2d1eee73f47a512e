# src/calamine/utils/configure_logging.py
import logging
import sys
from typing import Any, Dict, Optional, Union

from tqdm import tqdm

LOG_FORMAT = "%(asctime)s - %(levelname)s - [%(name)s:%(lineno)d] - %(message)s"

Level = Union[str, int]


class LogWithTqdm(logging.Handler):
    """
    Logging handler that writes through `tqdm.write()` so log lines do not
    tear the progress bars of a batch run.
    """
    def emit(self, record):
        try:
            msg = self.format(record)
            tqdm.write(msg, file=sys.stderr)
            self.flush()
        except Exception:
            self.handleError(record)


def _to_level(level: Level, fallback: int) -> int:
    if isinstance(level, str):
        return getattr(logging, level.upper(), fallback)
    return level


def configure_logger(general_level: Level = 'WARNING',
                     module_specific_levels: Optional[Dict[str, Level]] = None,
                     silenced_loggers: Optional[Dict[str, Level]] = None) -> None:
    """
    Configures the root logger with a tqdm-friendly handler and applies
    per-module levels.
    """
    handler = LogWithTqdm()
    handler.setFormatter(logging.Formatter(LOG_FORMAT))

    root_logger = logging.getLogger()
    root_logger.setLevel(_to_level(general_level, logging.WARNING))
    root_logger.handlers.clear()
    root_logger.addHandler(handler)

    for name, level in (module_specific_levels or {}).items():
        logging.getLogger(name).setLevel(_to_level(level, logging.INFO))

    # Muzzle noisy loggers by setting their level high.
    for name, level in (silenced_loggers or {}).items():
        logging.getLogger(name).setLevel(_to_level(level, logging.CRITICAL))


def configure_from_settings(debug_section: Optional[Dict[str, Any]], level_override: Optional[Level] = None) -> None:
    """Applies the `debug` section of settings.json; an explicit level wins."""
    section = debug_section or {}
    configure_logger(
        general_level=level_override or section.get("level", "WARNING"),
        module_specific_levels=section.get("module_levels"),
        silenced_loggers=section.get("silenced_loggers"),
    )
