"""
FastAPI Application - star system navigation backend.

Builds the star system snapshot once at startup and serves object lookups,
validation output, route planning and community hazard alerts.
"""

from __future__ import annotations

import logging
import os
import time
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from starnav import __version__
from starnav.api.database import init_db
from starnav.routing.planner import RoutePlanner
from starnav.system.loader import load_first_available
from starnav.system.query import SystemQueryService
from starnav.system.validator import SystemValidator
from starnav.utils.config_loader import Config

logger = logging.getLogger(__name__)

# Global app state (accessed by route modules)
app_state: dict = {}

CONFIG_DIR = Path("config")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Build the system snapshot and open the database on startup."""
    from dotenv import load_dotenv
    load_dotenv()

    t0 = time.perf_counter()
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s [%(name)s] %(levelname)s: %(message)s",
    )

    config = Config(Path(os.environ.get("STARNAV_CONFIG_DIR", CONFIG_DIR)))
    config.load_all()
    app_state["config"] = config

    # STARNAV_DATA_PATH overrides the configured fallback list
    override = os.environ.get("STARNAV_DATA_PATH")
    data_paths = [Path(override)] if override else list(config.api.data_paths)

    system, report, loaded_from = load_first_available(data_paths, config.hierarchy)
    query = SystemQueryService(system)

    app_state["system"] = system
    app_state["query"] = query
    app_state["validator"] = SystemValidator(system, query, system_prefix=config.hierarchy.system_prefix)
    app_state["validation"] = report
    app_state["planner"] = RoutePlanner(config.routing)
    app_state["data_path"] = str(loaded_from)

    if not report.valid:
        logger.warning("System loaded with %d validation issue(s)", len(report.issues))

    if config.api.database_url and not os.environ.get("DATABASE_URL"):
        os.environ["DATABASE_URL"] = config.api.database_url
    init_db()

    elapsed = time.perf_counter() - t0
    logger.info("Backend ready in %.2fs: %d objects from %s", elapsed, len(system), loaded_from)

    yield

    app_state.clear()
    logger.info("Backend shut down")


app = FastAPI(
    title="Star System Navigation API",
    description="Celestial hierarchy lookups, route planning and hazard alerts",
    version=__version__,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["http://localhost:5173", "http://localhost:8000"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Register routes
from starnav.api.routes.alerts import router as alerts_router
from starnav.api.routes.objects import router as objects_router
from starnav.api.routes.routing import router as routing_router
from starnav.api.routes.system import router as system_router

app.include_router(objects_router)
app.include_router(system_router)
app.include_router(routing_router)
app.include_router(alerts_router)


@app.get("/api/health")
async def health():
    """Health check endpoint."""
    system = app_state.get("system")
    report = app_state.get("validation")
    return {
        "status": "ok",
        "system": system.name if system else None,
        "objects_loaded": len(system) if system else 0,
        "root_id": system.root_id if system else None,
        "valid": report.valid if report else False,
        "data_path": app_state.get("data_path"),
    }
