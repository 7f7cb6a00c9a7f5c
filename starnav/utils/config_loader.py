"""
Configuration management for the navigation system.
Loads YAML configs with validation and environment variable support.
"""

from pathlib import Path
from typing import List, Optional

import yaml
from pydantic import BaseModel, Field, field_validator


class HierarchyConfig(BaseModel):
    """Configuration for hierarchy reconstruction."""

    system_name: str = Field("Stanton", min_length=1, description="Display name of the loaded system")
    system_prefix: str = Field("stanton", min_length=1, description="Id prefix used by planets and lagrange points")
    root_keywords: List[str] = Field(["star", "sun"], min_length=1, description="Id keywords identifying the star during repair")

    # Placeholder geometry for inferred lagrange points
    inferred_lagrange_size: float = Field(1000.0, ge=0, description="Size of an inferred lagrange point")
    inferred_lagrange_arrival_radius: float = Field(1000.0, ge=0, description="Arrival radius of an inferred lagrange point")

    @field_validator("system_prefix")
    @classmethod
    def _lowercase_prefix(cls, value: str) -> str:
        return value.strip().lower()

    @field_validator("root_keywords")
    @classmethod
    def _lowercase_keywords(cls, value: List[str]) -> List[str]:
        return [keyword.strip().lower() for keyword in value if keyword.strip()]

    class Config:
        """Pydantic config."""
        validate_assignment = True


class AlertConfig(BaseModel):
    """Configuration for hazard alert scoring and reporting."""

    confirmation_weight: float = Field(0.7, ge=0, le=1, description="Weight of confirmations in the safety score")
    dispute_weight: float = Field(0.3, ge=0, le=1, description="Weight of disputes in the safety score")
    decay_rate: float = Field(0.5, ge=0, le=1, description="Scale applied to the elapsed-lifetime fraction")
    default_lifetime_ms: int = Field(2 * 60 * 60 * 1000, gt=0, description="Alert lifetime (ms)")
    initial_safety_score: float = Field(20.0, ge=0, le=100, description="Safety score stamped on new alerts")
    report_throttle_ms: int = Field(5 * 60 * 1000, ge=0, description="Minimum time between reports in one region (ms)")

    class Config:
        """Pydantic config."""
        validate_assignment = True


class RoutingConfig(BaseModel):
    """Configuration for route planning."""

    default_quantum_speed: float = Field(200000.0, gt=0, description="Quantum speed when no ship is given (units/s)")
    hazard_radius: float = Field(1000000.0, gt=0, description="Search radius for hazards around a waypoint")
    alert_count_penalty: float = Field(0.1, ge=0, le=1, description="Score discount per nearby hazard")
    safe_route_threshold: float = Field(90.0, ge=0, le=100, description="Direct routes at or above this skip alternatives")
    alternative_margin: float = Field(5.0, ge=0, description="Points an alternative must beat the direct route by")
    max_alternatives: int = Field(3, ge=0, description="Maximum accepted alternative routes")
    use_absolute_positions: bool = Field(False, description="Measure distances in world space instead of stored positions")

    class Config:
        """Pydantic config."""
        validate_assignment = True


class APIConfig(BaseModel):
    """Configuration for the API server."""

    host: str = Field("0.0.0.0", description="API host")
    port: int = Field(8000, ge=1024, le=65535, description="API port")
    reload: bool = Field(False, description="Auto-reload on code changes")

    data_paths: List[Path] = Field(
        [
            Path("data/stanton_extract.json"),
            Path("stanton_extract.json"),
            Path("data/sample/stanton_extract.json"),
        ],
        min_length=1,
        description="Candidate input feed locations, tried in order",
    )
    database_url: Optional[str] = Field(None, description="Database connection URL (SQLite fallback when unset)")

    class Config:
        """Pydantic config."""
        validate_assignment = True


class Config:
    """Main configuration manager."""

    def __init__(self, config_dir: Path = Path("config")):
        """
        Initialize configuration manager.

        Args:
            config_dir: Directory containing configuration files
        """
        self.config_dir = Path(config_dir)
        self.hierarchy: Optional[HierarchyConfig] = None
        self.alerts: Optional[AlertConfig] = None
        self.routing: Optional[RoutingConfig] = None
        self.api: Optional[APIConfig] = None

    def load_all(self):
        """Load all configuration files."""
        self.hierarchy = self.load_config("hierarchy.yaml", HierarchyConfig)
        self.alerts = self.load_config("alerts.yaml", AlertConfig)
        self.routing = self.load_config("routing.yaml", RoutingConfig)
        self.api = self.load_config("api.yaml", APIConfig)

    def load_config(self, filename: str, config_class: type[BaseModel]) -> BaseModel:
        """
        Load and validate a configuration file.

        Args:
            filename: Config file name
            config_class: Pydantic model class for validation

        Returns:
            Validated configuration object

        Example:
            >>> config = Config()
            >>> routing = config.load_config("routing.yaml", RoutingConfig)
            >>> print(f"Hazard radius {routing.hazard_radius}")
        """
        filepath = self.config_dir / filename

        if not filepath.exists():
            return config_class()

        with open(filepath, "r") as f:
            config_dict = yaml.safe_load(f)

        if config_dict is None:
            return config_class()

        return config_class(**config_dict)

    def save_config(self, config: BaseModel, filename: str):
        """
        Save configuration to YAML file.

        Args:
            config: Configuration object to save
            filename: Output filename
        """
        filepath = self.config_dir / filename
        filepath.parent.mkdir(parents=True, exist_ok=True)

        with open(filepath, "w") as f:
            yaml.dump(config.model_dump(mode="json"), f, default_flow_style=False, sort_keys=False)

    def create_default_configs(self):
        """Create default configuration files if they don't exist."""
        self.config_dir.mkdir(parents=True, exist_ok=True)

        configs = [
            ("hierarchy.yaml", HierarchyConfig()),
            ("alerts.yaml", AlertConfig()),
            ("routing.yaml", RoutingConfig()),
            ("api.yaml", APIConfig()),
        ]

        for filename, config in configs:
            filepath = self.config_dir / filename
            if not filepath.exists():
                self.save_config(config, filename)
