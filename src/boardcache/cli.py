import click
import functools
import json
import logging
import traceback
from contextlib import contextmanager
from pathlib import Path as StdPath
from typing import Iterator

from .config import Config
from .constants import LogKind
from .context import Context
from .utils import setup_logger, parse_module_levels
from .exceptions import (
    BoardCacheError,
    ConfigurationError,
    InvalidArgumentError,
    QueryError,
    ThemeError,
)
from . import __version__


def complete_config_files(ctx, param, incomplete):
    """Auto-complete .yml and .yaml config files in current directory"""
    try:
        cwd = StdPath.cwd()
        yml_files = list(cwd.glob('*.yml')) + list(cwd.glob('*.yaml'))
        return sorted(f.name for f in yml_files if f.name.startswith(incomplete))
    except OSError as e:
        logging.debug(f"Config file auto-completion failed: {e}")
        return []


def setup_logging(debug: bool, log_levels: str = None, log_file: str = None):
    """Setup logger with debug and module-level configuration"""
    module_levels = parse_module_levels(log_levels) if log_levels else None
    if log_file:
        setup_logger(debug=debug, module_levels=module_levels, log_type="file", log_file=log_file)
    else:
        setup_logger(debug=debug, module_levels=module_levels)


def _fail(message: str):
    logging.error(message)
    ctx = click.get_current_context()
    if ctx.obj.get('debug'):
        traceback.print_exc()
    raise click.Abort()


def handle_errors(func):
    """Decorator to handle common exceptions"""
    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except ConfigurationError as e:
            _fail(f"Configuration error: {e}")
        except InvalidArgumentError as e:
            _fail(f"Invalid argument: {e}")
        except QueryError as e:
            _fail(f"Query error: {e}")
        except ThemeError as e:
            _fail(f"Theme error: {e}")
        except BoardCacheError as e:
            _fail(f"An unexpected application error occurred: {e}")
    return wrapper


def apply_cli_overrides(config: Config, debug: bool, log_levels: str = None, log_file: str = None):
    """Command line flags take precedence over the `debug` and `log` settings"""
    log_updates = {}
    if log_levels:
        log_updates['levels'] = {**config.log.levels, **parse_module_levels(log_levels)}
    if log_file:
        log_updates.update(type=LogKind.FILE, file_path=log_file)
    config.model = config.model.model_copy(update={
        'debug': config.debug or debug,
        'log': config.log.model_copy(update=log_updates),
    })


def report_cache_operations(context: Context):
    """Print the cache operations recorded in debug mode"""
    recorder = getattr(context.factory, 'recorder', None)
    if recorder is None or not recorder.entries:
        return
    click.echo("Cache operations:", err=True)
    for record in recorder.entries:
        click.echo(f"  {record}", err=True)


@contextmanager
def open_context(options: dict) -> Iterator[Context]:
    """Load the configuration, set up logging from it and yield a process context"""
    config = Config(options['config_file'])
    apply_cli_overrides(config, options['debug'], options['log_levels'], options['log_file'])
    context = Context.from_config(config)
    context.get_logger()
    try:
        yield context
    finally:
        report_cache_operations(context)
        context.close()


@handle_errors
def do_collect(options: dict):
    """Execute collect command"""
    with open_context(options) as context:
        driver = context.get_cache().driver
        collect = getattr(driver, "collect", None)
        if collect is None:
            click.echo(f"The {type(driver).__name__} backend expires entries by itself, nothing to collect")
            return
        count = collect()
        click.echo(f"Removed {count} expired entries")


@handle_errors
def do_flush(options: dict):
    """Execute flush command"""
    with open_context(options) as context:
        context.get_cache().flush()
        click.echo("Cache flushed")


@handle_errors
def do_get(options: dict, key: str):
    """Execute get command"""
    with open_context(options) as context:
        value = context.get_cache().get(key)
        if value is None:
            click.echo(f"'{key}' is not cached", err=True)
            click.get_current_context().exit(1)
        click.echo(json.dumps(value, indent=2, ensure_ascii=False))


@handle_errors
def do_delete(options: dict, key: str):
    """Execute delete command"""
    with open_context(options) as context:
        context.get_cache().delete(key)
        click.echo(f"Deleted '{key}'")


@handle_errors
def do_check_ip(options: dict, ip: str):
    """Execute check-ip command"""
    with open_context(options) as context:
        if context.get_dns_queries().is_spam_ip(ip):
            click.echo(f"{ip} is listed")
            click.get_current_context().exit(2)
        click.echo(f"{ip} is not listed")


@handle_errors
def do_rdns(options: dict, ip: str):
    """Execute rdns command"""
    with open_context(options) as context:
        names = context.get_dns_queries().ip_to_names(ip)
        if not names:
            click.echo(f"{ip} has no reverse names")
        for name in names:
            click.echo(name)


@handle_errors
def do_rebuild_themes(options: dict, action: str, board: str):
    """Execute rebuild-themes command"""
    with open_context(options) as context:
        rebuilt = context.get_theme_pages().rebuild_themes(action, board)
        for name in rebuilt:
            click.echo(f"Rebuilt theme {name}")
        click.echo(f"{len(rebuilt)} theme(s) rebuilt")


@click.group()
@click.option('-c', '--config', 'config_file', default='config.yml', show_default=True,
              shell_complete=complete_config_files, help='Path to the configuration file')
@click.option('--debug', is_flag=True, help='Enable debug logging and print the cache operations')
@click.option('-l', '--log-levels', help="Comma-separated per-module log levels (e.g., 'fs=DEBUG,dnsbl=INFO')")
@click.option('-f', '--log-file', help='Path to log file, overrides the configured log sink')
@click.version_option(version=__version__, prog_name='boardcache')
@click.pass_context
def cli(ctx, config_file, debug, log_levels, log_file):
    """boardcache - Inspect and maintain the board cache

    \b
    Examples:
      boardcache -c config.yml collect       Remove expired cache entries
      boardcache check-ip 203.0.113.7        Look an address up in the DNS blacklists
      boardcache rebuild-themes all          Run every installed theme
    """
    ctx.ensure_object(dict)
    ctx.obj.update(config_file=config_file, debug=debug, log_levels=log_levels, log_file=log_file)
    # Console logging until the configuration is loaded and picks the sink
    setup_logging(debug, log_levels, log_file)


@cli.command()
@click.pass_context
def collect(ctx):
    """Remove the expired entries of the file cache"""
    do_collect(ctx.obj)


@cli.command()
@click.pass_context
def flush(ctx):
    """Remove every cache entry"""
    do_flush(ctx.obj)


@cli.command()
@click.argument('key')
@click.pass_context
def get(ctx, key):
    """Print a cached value as JSON"""
    do_get(ctx.obj, key)


@cli.command()
@click.argument('key')
@click.pass_context
def delete(ctx, key):
    """Remove a cache entry"""
    do_delete(ctx.obj, key)


@cli.command('check-ip')
@click.argument('ip')
@click.pass_context
def check_ip(ctx, ip):
    """Check an address against the configured DNS blacklists

    Exits with status 2 when the address is listed.
    """
    do_check_ip(ctx.obj, ip)


@cli.command()
@click.argument('ip')
@click.pass_context
def rdns(ctx, ip):
    """Print the reverse DNS names of an address"""
    do_rdns(ctx.obj, ip)


@cli.command('rebuild-themes')
@click.argument('action')
@click.option('-b', '--board', help='Board uri the rebuild concerns')
@click.pass_context
def rebuild_themes(ctx, action, board):
    """Run the builder of every installed theme"""
    do_rebuild_themes(ctx.obj, action, board)
