#!/usr/bin/env python3
"""
CLI script for planning a route between two objects.

Prints the direct route and any safer single-detour alternatives given a
set of hazard alerts.
"""

import json
import sys
from pathlib import Path

import click

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from starnav.alerts.models import StoredAlert
from starnav.alerts.scoring import active_route_alerts
from starnav.routing.models import ShipSpecification
from starnav.routing.planner import RoutePlanner
from starnav.system.errors import StarSystemError
from starnav.system.loader import load_first_available
from starnav.utils.config_loader import Config
from starnav.utils.logging_config import get_logger

logger = get_logger("routing.cli")


def load_alerts(path: Path):
    """Read a JSON list of stored alert documents."""
    with open(path, "r") as f:
        docs = json.load(f)
    return [StoredAlert.from_dict(doc) for doc in docs]


def describe(plan) -> str:
    stops = " -> ".join(wp.object_id for wp in plan.waypoints)
    return (
        f"{stops}\n"
        f"    distance {plan.total_distance:,.0f}  time {plan.total_time:,.1f}s  "
        f"fuel {plan.fuel_required:,.2f}  safety {plan.overall_safety_score:.1f}"
    )


@click.command()
@click.argument('start_id')
@click.argument('end_id')
@click.option(
    '--data',
    '-d',
    'data_paths',
    multiple=True,
    type=click.Path(),
    help='Input feed (repeatable, tried in order)'
)
@click.option(
    '--alerts',
    '-a',
    'alerts_file',
    type=click.Path(exists=True),
    help='JSON file with a list of alert documents'
)
@click.option('--quantum-speed', type=float, help='Ship quantum speed (units/s)')
@click.option('--fuel-consumption', type=float, default=0.0, help='Fuel per 1,000,000 units travelled')
@click.option(
    '--alternatives',
    '-n',
    default=3,
    type=int,
    help='Maximum safer alternatives to look for (0 = direct route only)'
)
@click.option('--config-dir', default='config', type=click.Path(), help='Configuration directory')
@click.option('--json', 'as_json', is_flag=True, help='Print plans as JSON')
def main(start_id, end_id, data_paths, alerts_file, quantum_speed, fuel_consumption, alternatives, config_dir, as_json):
    """
    Plan a route from START_ID to END_ID.

    Examples:
        python scripts/plan_route.py stanton1 stanton4

        python scripts/plan_route.py stanton1 stanton4 -a alerts.json --quantum-speed 150000
    """
    config = Config(Path(config_dir))
    config.load_all()
    paths = [Path(p) for p in data_paths] or list(config.api.data_paths)

    try:
        system, _, _ = load_first_available(paths, config.hierarchy)
        alerts = active_route_alerts(load_alerts(Path(alerts_file))) if alerts_file else []

        ship = None
        if quantum_speed or fuel_consumption:
            ship = ShipSpecification(
                id="cli",
                name="Command-line ship",
                quantum_speed=quantum_speed or 0.0,
                fuel_consumption=fuel_consumption,
            )

        planner = RoutePlanner(config.routing)
        if alternatives > 0:
            plans = planner.find_alternatives(system, start_id, end_id, alerts, alternatives, ship)
        else:
            plans = [planner.plan_route(system, start_id, end_id, alerts, ship)]
    except (OSError, ValueError, StarSystemError) as e:
        click.echo(f"\n❌ Error: {e}", err=True)
        sys.exit(1)

    if as_json:
        click.echo(json.dumps([p.to_dict() for p in plans], indent=2))
        return

    click.echo(f"\nActive hazards considered: {len(alerts)}")
    for i, plan in enumerate(plans, 1):
        click.echo(f"\n[{i}] {describe(plan)}")


if __name__ == "__main__":
    main()
