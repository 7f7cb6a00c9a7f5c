#!/usr/bin/env python3
"""
Launch script for the navigation API.

Usage:
    python scripts/run_api.py              # Host/port from config/api.yaml
    python scripts/run_api.py --dev        # Hot reload
    python scripts/run_api.py --port 8080  # Custom port
"""

import os
import sys
from pathlib import Path

import click

PROJECT_ROOT = Path(__file__).resolve().parent.parent

# Ensure project root is on PYTHONPATH
sys.path.insert(0, str(PROJECT_ROOT))
os.chdir(PROJECT_ROOT)

from starnav.utils.config_loader import Config


@click.command()
@click.option('--dev', is_flag=True, help='Run in dev mode with hot reload')
@click.option('--host', default=None, help='Host to bind (default from api.yaml)')
@click.option('--port', default=None, type=int, help='Port (default from api.yaml)')
@click.option('--data', 'data_path', default=None, type=click.Path(exists=True), help='Input feed override')
def main(dev, host, port, data_path):
    """Start the navigation API with uvicorn."""
    config = Config()
    config.load_all()
    host = host or config.api.host
    port = port or config.api.port

    if data_path:
        os.environ["STARNAV_DATA_PATH"] = str(Path(data_path).resolve())

    click.echo("Starting star system navigation API...")
    click.echo(f"  URL: http://{host}:{port}")
    click.echo("")

    import uvicorn
    uvicorn.run(
        "starnav.api.main:app",
        host=host,
        port=port,
        reload=dev or config.api.reload,
        log_level="info",
    )


if __name__ == "__main__":
    main()
