# logger.py
import logging
import logging.handlers
import sys
import os
from typing import Dict, Optional

import colorlog

from .. import constants
from ..constants import LogKind

_HANDLER_MARK = "_boardcache_sink"


def setup_logger(
    debug: bool = False,
    module_levels: Optional[Dict[str, str]] = None,
    log_type: LogKind = LogKind.STDERR,
    log_file: Optional[str] = None,
    syslog_address: str = "/dev/log",
    name: str = constants.DEFAULT_LOG_NAME,
):
    """
    Configures the root logger for the application.

    Args:
        debug: Enable debug logging level
        module_levels: Per-module log levels
        log_type: Sink for log records: stderr, file, syslog or none
        log_file: Path of the log file, for the 'file' sink
        syslog_address: Socket path or (host, port) of the syslog daemon
        name: Identifier prefixed to syslog records
    """
    logger = logging.getLogger()
    level = logging.DEBUG if debug else logging.INFO
    logger.setLevel(level)

    # A later call replaces the sink of an earlier one, handlers added by others stay
    for handler in [h for h in logger.handlers if getattr(h, _HANDLER_MARK, False)]:
        logger.removeHandler(handler)
        handler.close()

    handler = _build_handler(LogKind(log_type), log_file, syslog_address, name)
    setattr(handler, _HANDLER_MARK, True)
    logger.addHandler(handler)

    _apply_module_levels(module_levels)


def _build_handler(log_type: LogKind, log_file: Optional[str], syslog_address: str, name: str) -> logging.Handler:
    if log_type is LogKind.NONE:
        return logging.NullHandler()
    if log_type is LogKind.FILE and log_file:
        file_handler = logging.FileHandler(log_file, mode='a', encoding='utf-8')
        file_handler.setLevel(logging.NOTSET)
        file_handler.setFormatter(logging.Formatter(
            '%(asctime)s [%(levelname).4s] %(name)s: %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S'
        ))
        return file_handler
    if log_type is LogKind.SYSLOG:
        syslog_handler = logging.handlers.SysLogHandler(address=syslog_address)
        syslog_handler.setLevel(logging.NOTSET)
        syslog_handler.setFormatter(logging.Formatter(f'{name}: [%(levelname).4s] %(name)s: %(message)s'))
        return syslog_handler
    return _console_handler()


def _console_handler() -> logging.Handler:
    # Respect NO_COLOR env var (https://no-color.org/)
    use_colors = sys.stderr.isatty() and not os.environ.get("NO_COLOR")

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(logging.NOTSET)
    if use_colors:
        console_formatter = colorlog.ColoredFormatter(
            '%(log_color)s[%(levelname).4s]%(reset)s %(cyan)s%(name)s%(reset)s: %(message)s',
            log_colors={
                'DEBUG': 'cyan',
                'INFO': 'green',
                'WARNING': 'yellow',
                'ERROR': 'red',
                'CRITICAL': 'red,bg_white',
            },
            reset=True,
            style='%'
        )
    else:
        console_formatter = logging.Formatter('[%(levelname).4s] %(name)s: %(message)s')
    console_handler.setFormatter(console_formatter)
    return console_handler


def parse_module_levels(spec: str) -> Dict[str, str]:
    """Parse ``"fs=DEBUG,dnsbl=INFO"`` into a name -> level mapping."""
    module_levels = {}
    for pair in spec.split(','):
        pair = pair.strip()
        if not pair or '=' not in pair:
            continue
        name, lvl = pair.split('=', 1)
        module_levels[name.strip()] = lvl.strip().upper()
    return module_levels


def _apply_module_levels(module_levels: Optional[Dict[str, str]]):
    """Apply per-module logger levels from mapping or env var BOARDCACHE_LOG_LEVELS.

    module_levels format: {"boardcache.cache.fs": "DEBUG", "dnsbl": "INFO"}
    Env var example: BOARDCACHE_LOG_LEVELS="fs=DEBUG,dnsbl=INFO"
    """
    if module_levels is None:
        env = os.environ.get(constants.LOG_LEVELS_ENV)
        if env:
            module_levels = parse_module_levels(env)

    if not module_levels:
        return

    for name, lvl_str in module_levels.items():
        lvl = logging.getLevelName(lvl_str.upper())
        if not isinstance(lvl, int):
            logging.getLogger(__name__).warning(f"Ignoring unknown log level '{lvl_str}' for '{name}'")
            continue
        logging.getLogger(_normalize_module_name(name)).setLevel(lvl)


def _normalize_module_name(name: str) -> str:
    """Normalize provided module name with alias and auto-prefix.

    - If name is an alias, expand to full module path.
    - If name ends with '.*', treat it as base logger (strip the wildcard).
    - If name does not start with 'boardcache.' and begins with a known top module, prefix 'boardcache.'.
    """
    if name in constants.LOG_ALIAS_MAP:
        return constants.LOG_ALIAS_MAP[name]
    if name.endswith('.*'):
        name = name[:-2]
    if not name.startswith('boardcache.'):
        first = name.split('.', 1)[0]
        if first in constants.KNOWN_TOP_MODULES:
            name = f'boardcache.{name}'
    return name
