#!/usr/bin/env python3
"""
Pangloss CLI - inspect optimizer configurations

Run: pangloss --help
"""

import logging
import sys

import click

from . import __version__
from .core.errors import PanglossError
from .training.optimizers import OPTIMIZER_REGISTRY, describe_parameters, get_optimizer_info
from .training.schedulers import SCHEDULER_REGISTRY
from .utils.config import load_config
from .utils.logging import setup_logging


@click.group()
@click.version_option(version=__version__)
@click.option('--verbose', '-v', is_flag=True, help='Enable debug logging')
def cli(verbose):
    """
    Pangloss: optimizer coordination for indexed parameters

    Per-parameter learning rate and weight decay multipliers, update
    counting, schedules and native optimizer delegation.
    """
    setup_logging('pangloss', level=logging.DEBUG if verbose else logging.WARNING, file=False)


@cli.command('list')
def list_components():
    """List registered optimizers and schedulers."""
    for title, registry in (('Optimizers', OPTIMIZER_REGISTRY), ('Schedulers', SCHEDULER_REGISTRY)):
        click.secho(f"{title}:", fg='cyan', bold=True)
        metadata = registry.metadata()
        for name in registry.names():
            doc = (metadata[name]['doc'] or '').strip().splitlines()
            click.secho(f"  {name:<12}", fg='yellow', nl=False)
            click.secho(doc[0] if doc else '', fg='white', dim=True)
        click.echo()


@cli.command()
@click.argument('config', type=click.Path(exists=True, dir_okay=False))
@click.option('--step', '-s', 'steps', type=int, multiple=True,
              help='Also print the scheduled learning rate at this step (repeatable)')
def inspect(config, steps):
    """Show effective learning rate and weight decay for every mapped index."""
    try:
        optimizer_config = load_config(config)
        optimizer = optimizer_config.build_optimizer()
    except (PanglossError, OSError) as e:
        click.secho(f"Failed to load config: {e}", fg='red', err=True)
        sys.exit(1)

    with optimizer:
        info = get_optimizer_info(optimizer)
        click.secho(f"{optimizer_config.name}", fg='bright_blue', bold=True)
        for key, value in info.items():
            click.secho(f"   {key + ':':<18}", fg='white', dim=True, nl=False)
            click.secho(f"{value}", fg='cyan')
        click.echo()

        rows = describe_parameters(optimizer)
        if rows:
            click.secho(f"  {'index':>5}  {'name':<24} {'lr_mult':>8} {'wd_mult':>8} {'lr':>12} {'wd':>12}",
                        fg='cyan', bold=True)
            for row in rows:
                click.echo(
                    f"  {row['index']:>5}  {row['name'] or '-':<24} "
                    f"{row['lr_mult']:>8.4g} {row['wd_mult']:>8.4g} "
                    f"{row['lr']:>12.6g} {row['wd']:>12.6g}"
                )
        else:
            click.secho("  No parameter indices mapped", fg='yellow')

        if steps:
            click.echo()
            click.secho("Schedule:", fg='cyan', bold=True)
            schedule = optimizer.schedule
            for step in steps:
                rate = schedule.rate_at(step) if schedule is not None else optimizer.learning_rate
                click.echo(f"  step {step:>8}: {rate:.6g}")


def main():
    cli()


if __name__ == '__main__':
    main()
