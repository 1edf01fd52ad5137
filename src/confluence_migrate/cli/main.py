"""Main CLI entry point for the Confluence folder migration tool."""

import sys
from collections import Counter
from typing import Optional
from pathlib import Path

import click
from rich.console import Console
from rich.panel import Panel
from rich.progress import (
    Progress,
    SpinnerColumn,
    TextColumn,
    BarColumn,
    TaskProgressColumn,
)
from rich.table import Table

from .. import __version__
from ..config.config import Config
from ..utils.logging import setup_logging
from ..migration.engine import MigrationEngine
from ..migration.dispatcher import select_family

console = Console()


@click.group()
@click.version_option(version=__version__, prog_name='confluence-migrate')
@click.option(
    '--config',
    '-c',
    type=click.Path(exists=True),
    help='Path to configuration file',
)
@click.option(
    '--verbose',
    '-v',
    is_flag=True,
    help='Enable verbose logging',
)
@click.pass_context
def cli(ctx: click.Context, config: Optional[str], verbose: bool) -> None:
    """Confluence Migration Tool - Import a folder tree into a Confluence space."""
    ctx.ensure_object(dict)

    if config:
        ctx.obj['config_path'] = config
    ctx.obj['verbose'] = verbose

    # Setup basic logging first (will be enhanced later with config)
    log_level = 'DEBUG' if verbose else 'INFO'
    setup_logging(log_level)


@cli.command()
@click.option(
    '--output',
    '-o',
    default='config.yaml',
    help='Output configuration file path',
)
@click.pass_context
def init(ctx: click.Context, output: str) -> None:
    """Initialize a new configuration file."""
    console.print(
        Panel.fit(
            '[bold green]Confluence Migration Tool[/bold green]\n'
            'Initializing configuration...',
            border_style='green',
        )
    )

    try:
        Config.create_template(output)

        console.print(f'[green]✓[/green] Configuration template created at: {output}')
        console.print(
            f'[yellow]Please edit {output} with your Confluence and folder details[/yellow]'
        )

    except Exception as e:
        console.print(f'[red]✗[/red] Failed to create configuration: {e}')
        sys.exit(1)


@cli.command()
@click.option(
    '--dry-run',
    is_flag=True,
    help='List what would be imported without opening a browser',
)
@click.pass_context
def migrate(ctx: click.Context, dry_run: bool) -> None:
    """Start the migration process."""
    console.print(
        Panel.fit(
            '[bold blue]Confluence Migration Tool[/bold blue]\n'
            'Starting migration process...',
            border_style='blue',
        )
    )

    if dry_run:
        console.print(
            '[yellow]Running in dry-run mode - no changes will be made[/yellow]'
        )

    try:
        config = _load_config(ctx)
        _setup_logging_with_config(ctx, config)
        _run_migration(config, dry_run)

    except Exception as e:
        console.print(f'[red]✗[/red] Migration failed: {e}')
        if ctx.obj.get('verbose'):
            console.print_exception()
        sys.exit(1)


@cli.command()
@click.pass_context
def validate(ctx: click.Context) -> None:
    """Validate the configuration, source folder and wiki connectivity."""
    console.print(
        Panel.fit(
            '[bold cyan]Confluence Migration Tool[/bold cyan]\nValidating setup...',
            border_style='cyan',
        )
    )

    try:
        config = _load_config(ctx)

        engine = MigrationEngine(config)
        engine.test_connectivity()

        console.print('[green]✓[/green] Connectivity validation passed')
        console.print('[green]✓[/green] Configuration validation completed')

    except Exception as e:
        console.print(f'[red]✗[/red] Validation failed: {e}')
        if ctx.obj.get('verbose'):
            console.print_exception()
        sys.exit(1)


@cli.command()
@click.pass_context
def status(ctx: click.Context) -> None:
    """Show configuration and how much of the folder is migrated."""
    console.print(
        Panel.fit(
            '[bold magenta]Confluence Migration Tool[/bold magenta]\nMigration Status',
            border_style='magenta',
        )
    )

    try:
        config = _load_config(ctx)
        _setup_logging_with_config(ctx, config)

        table = Table(title='Migration Configuration')
        table.add_column('Setting', style='cyan')
        table.add_column('Value', style='green')

        table.add_row('Wiki URL', config.wiki.base_url)
        table.add_row('Space', config.wiki.space)
        table.add_row('Test Instance', '✓' if config.wiki.is_testing else '✗')
        table.add_row('Import From', config.source.root)
        table.add_row('Retry Attempts', str(config.retry.max_attempts))
        table.add_row('Retry Delay', f'{config.retry.delay}s')

        console.print(table)

        engine = MigrationEngine(config)
        if not Path(config.source.root).is_dir():
            console.print(
                f'[yellow]Folder {config.source.root} does not exist[/yellow]'
            )
            return

        counts = Counter()
        for source_file in engine.source_tree.files():
            if source_file.migrated:
                counts['migrated'] += 1
            elif select_family(source_file.extension) is None:
                counts['unsupported'] += 1
            else:
                counts['pending'] += 1

        files_table = Table(title='Source Files')
        files_table.add_column('Migrated', style='green')
        files_table.add_column('Pending', style='yellow')
        files_table.add_column('Unsupported', style='red')
        files_table.add_row(
            str(counts['migrated']), str(counts['pending']), str(counts['unsupported'])
        )
        console.print(files_table)

    except Exception as e:
        console.print(f'[red]✗[/red] Failed to load status: {e}')
        if ctx.obj.get('verbose'):
            console.print_exception()
        sys.exit(1)


def _load_config(ctx: click.Context) -> Config:
    """Load configuration from file or environment."""
    config_path = ctx.obj.get('config_path')

    if config_path:
        if not Path(config_path).exists():
            raise FileNotFoundError(f'Configuration file not found: {config_path}')
        return Config.from_file(config_path)
    else:
        # Try to load from default locations
        default_paths = ['config.yaml', 'config.yml', '.confluence-migrate.yaml']
        for path in default_paths:
            if Path(path).exists():
                return Config.from_file(path)

        # Fall back to environment variables
        try:
            return Config.from_env()
        except Exception:
            raise FileNotFoundError(
                'No configuration found. Use --config to specify a file or run '
                '"confluence-migrate init" to create one.'
            )


def _setup_logging_with_config(ctx: click.Context, config: Config) -> None:
    """Setup logging with configuration from config file."""
    verbose = ctx.obj.get('verbose', False)

    # Use config logging settings, but allow verbose flag to override level
    log_level = 'DEBUG' if verbose else config.logging.level

    setup_logging(
        level=log_level, log_file=config.logging.file, log_format=config.logging.format
    )


def _run_migration(config: Config, dry_run: bool = False) -> None:
    """Run the migration process with progress display."""
    engine = MigrationEngine(config)

    if dry_run:
        summary = engine.dry_run()
        console.print('[green]✓[/green] Dry run completed successfully')
        _display_migration_summary(summary)
        return

    with Progress(
        SpinnerColumn(),
        TextColumn('[progress.description]{task.description}'),
        BarColumn(),
        TaskProgressColumn(),
        console=console,
    ) as progress:
        task = progress.add_task(
            '[blue]Migration in progress...', total=engine.count_files()
        )

        def update_progress(outcome) -> None:
            progress.update(
                task,
                advance=1,
                description=f'[blue]{Path(outcome.source_path).name}',
            )

        try:
            summary = engine.migrate(progress=update_progress)
        except Exception as e:
            progress.update(task, description=f'[red]Failed: {e}')
            raise

        progress.update(task, description='[green]Migration completed')

    console.print('[green]✓[/green] Migration completed successfully')
    _display_migration_summary(summary)


def _display_migration_summary(summary) -> None:
    """Display migration summary results."""
    table = Table(title='Migration Summary')
    table.add_column('File Type', style='cyan')
    table.add_column('Total', style='blue')
    table.add_column('Successful', style='green')
    table.add_column('Failed', style='red')
    table.add_column('Skipped', style='yellow')
    table.add_column('Pending', style='magenta')

    for family, counts in summary.results_by_family.items():
        table.add_row(
            family.replace('_', ' ').title(),
            str(counts.get('total', 0)),
            str(counts.get('successful', 0)),
            str(counts.get('failed', 0)),
            str(counts.get('skipped', 0)),
            str(counts.get('pending', 0)),
        )

    table.add_row(
        'Total',
        str(summary.total_files),
        str(summary.successful_migrations),
        str(summary.failed_migrations),
        str(summary.skipped_migrations),
        str(summary.pending_migrations),
    )

    console.print(table)

    if summary.completed_at:
        duration = summary.completed_at - summary.started_at
        console.print(f'\n[blue]Migration Duration:[/blue] {duration}')

    errors = [
        f'{result.source_path}: {result.error_message}'
        for result in summary.all_results
        if result.error_message
    ]
    if errors:
        console.print(f'\n[red]Errors ({len(errors)}):[/red]')
        for error in errors[:5]:  # Show first 5 errors
            console.print(f'  • {error}')
        if len(errors) > 5:
            console.print(f'  ... and {len(errors) - 5} more errors')


def main() -> None:
    """Main entry point for the CLI application."""
    try:
        cli()
    except KeyboardInterrupt:
        console.print('\n[red]Migration interrupted by user[/red]')
        sys.exit(1)
    except Exception as e:
        console.print(f'[red]Error: {e}[/red]')
        sys.exit(1)


if __name__ == '__main__':
    main()
