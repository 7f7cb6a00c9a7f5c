#!/usr/bin/env python3
"""
CLI script for inspecting a star system data feed.

Builds the hierarchy, prints the validation report and optionally the
hierarchy dump, statistics, applied repairs and disconnected objects.
"""

import json
import sys
from pathlib import Path

import click

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from starnav.system.errors import StarSystemError
from starnav.system.loader import load_first_available
from starnav.system.validator import SystemValidator
from starnav.utils.config_loader import Config
from starnav.utils.logging_config import get_logger

logger = get_logger("hierarchy.inspect")


@click.command()
@click.option(
    '--data',
    '-d',
    'data_paths',
    multiple=True,
    type=click.Path(),
    help='Input feed (repeatable, tried in order; defaults to api.yaml data_paths)'
)
@click.option(
    '--config-dir',
    default='config',
    type=click.Path(),
    help='Configuration directory'
)
@click.option('--hierarchy', 'show_hierarchy', is_flag=True, help='Print the indented hierarchy')
@click.option('--stats', 'show_stats', is_flag=True, help='Print statistics as JSON')
@click.option('--repairs', 'show_repairs', is_flag=True, help='List parent repairs')
@click.option('--disconnected', 'show_disconnected', is_flag=True, help='List objects not reaching a star')
def main(data_paths, config_dir, show_hierarchy, show_stats, show_repairs, show_disconnected):
    """
    Inspect a star system feed.

    Examples:
        # Validate the default feed
        python scripts/inspect_system.py

        # Full report for a specific file
        python scripts/inspect_system.py -d data/sample/stanton_extract.json --hierarchy --stats --repairs
    """
    config = Config(Path(config_dir))
    config.load_all()
    paths = [Path(p) for p in data_paths] or list(config.api.data_paths)

    try:
        system, report, loaded_from = load_first_available(paths, config.hierarchy)
    except (OSError, StarSystemError) as e:
        click.echo(f"\n❌ Error: {e}", err=True)
        sys.exit(1)

    validator = SystemValidator(system, system_prefix=config.hierarchy.system_prefix)

    click.echo("\n" + "=" * 60)
    click.echo(f"Star system:   {system.name}")
    click.echo(f"Source:        {loaded_from}")
    click.echo(f"Objects:       {len(system)}")
    click.echo(f"Root:          {system.root_id}")
    click.echo(f"Inferred:      {len(system.inferred_ids)}")
    click.echo(f"Repairs:       {len(system.repairs)}")
    click.echo("=" * 60)

    if report.valid:
        click.echo("\n✅ Validation passed")
    else:
        click.echo(f"\n⚠️  {len(report.issues)} validation issue(s):")
        for issue in report.issues:
            click.echo(f"  - {issue}")

    if show_hierarchy:
        click.echo("")
        click.echo(validator.generate_hierarchy_text(), nl=False)

    if show_stats:
        click.echo("\nStatistics:")
        click.echo(json.dumps(validator.generate_statistics(), indent=2, sort_keys=True))

    if show_repairs:
        click.echo("\nRepairs:")
        for decision in system.repairs:
            old = decision.old_parent or "(none)"
            new = decision.new_parent or "(none)"
            click.echo(f"  {decision.object_id:40s} {old} -> {new}  [{decision.rule.value}]")

    if show_disconnected:
        disconnected = validator.find_disconnected()
        click.echo(f"\nDisconnected objects: {len(disconnected)}")
        for obj in disconnected:
            click.echo(f"  {obj.display_name} ({obj.id})")

    sys.exit(0 if report.valid else 2)


if __name__ == "__main__":
    main()
