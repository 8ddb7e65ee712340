from .logger import setup_logger, parse_module_levels

__all__ = ['setup_logger', 'parse_module_levels']
