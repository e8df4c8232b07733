"""Command-line interface for the save archiver."""

import json
import logging
import os
import sys
from logging.handlers import RotatingFileHandler
from typing import Optional, Sequence

import click

from .core.archiver import SaveArchiver
from .core.errors import ArchiverError
from .core.models import BackupEntry, RestoreOutcome
from .config.config_manager import ConfigManager
from .utils.formatters import format_file_size


def setup_logging(level: str, log_file: Optional[str] = None,
                  max_size_mb: float = 10, backup_count: int = 5):
    """Set up logging configuration."""
    # Convert string level to logging constant
    numeric_level = getattr(logging, level.upper(), None)
    if not isinstance(numeric_level, int):
        raise ValueError(f'Invalid log level: {level}')
    
    formatter = logging.Formatter(
        '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )
    
    root_logger = logging.getLogger()
    root_logger.setLevel(numeric_level)
    
    # Clear existing handlers
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)
    
    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)
    
    if log_file:
        try:
            file_handler = RotatingFileHandler(
                log_file,
                maxBytes=int(max_size_mb * 1024 * 1024),
                backupCount=backup_count,
                encoding='utf-8'
            )
            file_handler.setFormatter(formatter)
            root_logger.addHandler(file_handler)
        except OSError as e:
            click.echo(f"Warning: Could not set up file logging: {e}", err=True)


@click.group()
@click.option('--config', '-c', 'config_path',
              help='Path to configuration file')
@click.option('--log-level', default=None,
              type=click.Choice(['DEBUG', 'INFO', 'WARNING', 'ERROR'], case_sensitive=False),
              help='Logging level (overrides the config file)')
@click.option('--log-file',
              help='Log file path (overrides the config file)')
@click.pass_context
def cli(ctx, config_path: Optional[str], log_level: Optional[str], log_file: Optional[str]):
    """Save Archiver - Back up a game save on every change and restore old versions."""
    ctx.ensure_object(dict)
    
    try:
        config_manager = ConfigManager(config_path)
        config_manager.load_config()
    except (FileNotFoundError, ValueError) as e:
        click.echo(f"❌ Configuration error: {e}", err=True)
        sys.exit(1)
    
    logging_config = config_manager.get_logging_config()
    setup_logging(
        log_level or logging_config.get('level', 'INFO'),
        log_file or logging_config.get('file'),
        max_size_mb=logging_config.get('max_size_mb', 10),
        backup_count=logging_config.get('backup_count', 5)
    )
    
    ctx.obj['config_path'] = config_path
    ctx.obj['config_manager'] = config_manager


def _open_archiver(ctx, directory: Optional[str]) -> SaveArchiver:
    """Create an archiver with ``directory`` (or the first discovered one) selected."""
    archiver = SaveArchiver(ctx.obj.get('config_path'))
    
    if directory is None:
        save_dirs = archiver.discover_save_dirs()
        directory = save_dirs[0]
    else:
        directory = os.path.abspath(directory)
        archiver.save_dirs = [directory]
    
    archiver.select_directory(directory)
    return archiver


def _print_catalog(directory: str, entries: Sequence[BackupEntry]):
    click.echo(f"\n💾 Backups in {directory}")
    click.echo("=" * 50)
    
    if not entries:
        click.echo("  No backups yet")
        return
    
    for i, entry in enumerate(entries, 1):
        path = os.path.join(directory, entry.filename)
        try:
            size = format_file_size(os.path.getsize(path))
        except OSError:
            size = "?"
        click.echo(f"  {i:3d}. {entry.label}  {entry.filename}  ({size})")


def _print_outcome(outcome: RestoreOutcome):
    if not outcome.success:
        click.echo(f"❌ {outcome.message}", err=True)
        if outcome.stage is not None and outcome.stage.number >= 2:
            click.echo("   The live save was moved to its .orig file and must be recovered by hand.", err=True)
        return
    
    click.echo(f"✅ {outcome.message}")
    for warning in outcome.warnings:
        click.echo(f"⚠️  {warning}", err=True)


@cli.command()
@click.pass_context
def dirs(ctx):
    """List discovered save directories."""
    try:
        archiver = SaveArchiver(ctx.obj.get('config_path'))
        save_dirs = archiver.discover_save_dirs()
    except ArchiverError as e:
        click.echo(f"Error discovering save directories: {e}", err=True)
        sys.exit(1)
    
    click.echo(f"📂 Found {len(save_dirs)} save directories:")
    for i, directory in enumerate(save_dirs, 1):
        click.echo(f"  {i}. {directory}")


@cli.command(name='list')
@click.option('--dir', '-d', 'directory', type=click.Path(file_okay=False),
              help='Save directory (default: first discovered)')
@click.option('--output', '-o', type=click.Choice(['text', 'json']), default='text',
              help='Output format')
@click.pass_context
def list_backups(ctx, directory: Optional[str], output: str):
    """List the backups in a save directory."""
    try:
        archiver = _open_archiver(ctx, directory)
    except ArchiverError as e:
        click.echo(f"Error listing backups: {e}", err=True)
        sys.exit(1)
    
    selected, entries = archiver.state.snapshot()
    
    if output == 'json':
        json_results = {
            'directory': selected,
            'backups': [
                {
                    'filename': entry.filename,
                    'timestamp': entry.timestamp,
                    'label': entry.label,
                    'modified_time': entry.modified_time.isoformat()
                }
                for entry in entries
            ]
        }
        click.echo(json.dumps(json_results, indent=2))
    else:
        _print_catalog(selected, entries)


@cli.command()
@click.argument('backup_name')
@click.option('--dir', '-d', 'directory', type=click.Path(file_okay=False),
              help='Save directory (default: first discovered)')
@click.option('--yes', '-y', is_flag=True, help='Do not ask for confirmation')
@click.pass_context
def restore(ctx, backup_name: str, directory: Optional[str], yes: bool):
    """Restore BACKUP_NAME as the live save."""
    try:
        archiver = _open_archiver(ctx, directory)
    except ArchiverError as e:
        click.echo(f"Error opening save directory: {e}", err=True)
        sys.exit(1)
    
    if not yes:
        click.confirm(
            f"Replace {archiver.save_spec.primary_name} in {archiver.selected_directory} with {backup_name}?",
            abort=True
        )
    
    outcome = archiver.restore(backup_name)
    _print_outcome(outcome)
    if not outcome.success:
        sys.exit(1)


@cli.command()
@click.option('--dir', '-d', 'directory', type=click.Path(file_okay=False),
              help='Save directory (default: first discovered)')
@click.option('--interval', '-i', type=click.FloatRange(min=0, min_open=True),
              help='Seconds between checks (overrides the config file)')
@click.pass_context
def watch(ctx, directory: Optional[str], interval: Optional[float]):
    """Back up the live save on every change, with an interactive prompt."""
    try:
        archiver = _open_archiver(ctx, directory)
    except ArchiverError as e:
        click.echo(f"Error opening save directory: {e}", err=True)
        sys.exit(1)
    
    if interval is not None:
        archiver.poll_interval = interval
    
    archiver.add_listener(
        on_backup=lambda entry: click.echo(f"🆕 New backup: {entry.label}  {entry.filename}"),
        on_error=lambda error: click.echo(f"❌ {error}", err=True)
    )
    archiver.start_watching()
    _print_catalog(archiver.selected_directory, archiver.catalog)
    
    try:
        _interactive_loop(archiver)
    finally:
        archiver.stop_watching()
        click.echo("Stopped watching.")


def _interactive_loop(archiver: SaveArchiver):
    """Read commands until the user quits."""
    help_text = "Commands: l = list, r N = restore backup N, d N = switch to directory N, q = quit"
    click.echo(help_text)
    
    while True:
        try:
            line = click.prompt(">", default="", show_default=False, prompt_suffix=" ")
        except click.Abort:
            return
        
        parts = line.split()
        if not parts:
            continue
        command, args = parts[0].lower(), parts[1:]
        
        if command == 'q':
            return
        elif command == 'l':
            directory, entries = archiver.state.snapshot()
            _print_catalog(directory, entries)
        elif command == 'r':
            entry = _pick(archiver.catalog, args, "backup")
            if entry is not None:
                _print_outcome(archiver.restore(entry.filename))
        elif command == 'd':
            directory = _pick(archiver.save_dirs, args, "directory")
            if directory is not None:
                try:
                    entries = archiver.select_directory(directory)
                except ArchiverError as e:
                    click.echo(f"❌ {e}", err=True)
                    continue
                if not archiver.is_watching:
                    archiver.start_watching()
                _print_catalog(directory, entries)
        else:
            click.echo(help_text)


def _pick(items: Sequence, args: Sequence[str], what: str):
    """Return the item chosen by a 1-based index argument."""
    if len(args) != 1:
        click.echo(f"Please give the number of the {what}.")
        return None
    try:
        index = int(args[0]) - 1
    except ValueError:
        click.echo(f"Invalid number: {args[0]}")
        return None
    if not 0 <= index < len(items):
        click.echo(f"Invalid number. Please enter 1-{len(items)}.")
        return None
    return items[index]


@cli.command()
@click.pass_context
def validate_config(ctx):
    """Validate configuration file."""
    config_manager = ctx.obj['config_manager']
    
    if config_manager.config_file:
        click.echo(f"✅ Configuration loaded successfully from {config_manager.config_file}")
    else:
        click.echo("✅ No configuration file found, using defaults")
    
    save_config = config_manager.get_save_config()
    monitoring_config = config_manager.get_monitoring_config()
    discovery_config = config_manager.get_discovery_config()
    
    click.echo(f"\n📊 Configuration Summary:")
    click.echo(f"   Live save: {save_config['base_name']}{save_config['extension']}")
    click.echo(f"   Poll interval: {monitoring_config['poll_interval_seconds']}s")
    click.echo(f"   Steam app id: {discovery_config['app_id']}")
    click.echo(f"   Steam path: {discovery_config['steam_path'] or 'auto-detect'}")
    
    directories = config_manager.get_save_directories()
    click.echo(f"   Configured save directories: {len(directories)}")
    for i, directory in enumerate(directories, 1):
        click.echo(f"     {i}. {directory}")


def main():
    """Main CLI entry point."""
    cli()


if __name__ == '__main__':
    main()
