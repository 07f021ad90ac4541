"""
Game configuration.

Timings, search-radius tunables and collaborator settings, loadable from a
YAML or JSON file.
"""

import json
import logging
from pathlib import Path

import yaml
from pydantic import BaseModel, ConfigDict, Field

logger = logging.getLogger(__name__)

DEFAULT_NOMINATIM_URL = "https://nominatim.openstreetmap.org"
DEFAULT_USER_AGENT = "hideout-seeker/1.0"


class GameConfig(BaseModel):
    """All tunables for a session."""
    model_config = ConfigDict(extra="forbid")

    # Phase timings (ticks are one tick_seconds each)
    hide_countdown_ticks: int = Field(default=3, gt=0)
    release_countdown_ticks: int = Field(default=5, gt=0)
    answer_seconds: int = Field(default=15, gt=0)
    result_seconds: float = Field(default=3.0, gt=0)
    movement_interval_seconds: float = Field(default=10.0, gt=0)
    tick_seconds: float = Field(default=1.0, gt=0)

    # Seeker behaviour
    seed_radius_miles: float = Field(default=1.0, gt=0)
    wander_radius_miles: float = Field(default=0.5, gt=0)
    max_step_miles: float = Field(default=1.0, gt=0)
    letter_probability: float = Field(default=0.3, ge=0.0, le=1.0)
    random_seed: int | None = None

    # AI content service
    model_name: str = "gpt-4o"
    temperature: float = Field(default=0.7, ge=0.0, le=2.0)

    # Geocoding search service
    nominatim_url: str = DEFAULT_NOMINATIM_URL
    user_agent: str = DEFAULT_USER_AGENT
    request_timeout: float = Field(default=10.0, gt=0)
    search_limit: int = Field(default=10, gt=0)


def load_config(config_path: str | Path | None) -> GameConfig:
    """Load configuration from a YAML or JSON file, falling back to defaults."""
    if config_path is None:
        return GameConfig()

    path = Path(config_path)
    if not path.exists():
        logger.warning(f"Config file not found: {config_path}")
        return GameConfig()

    with open(path) as f:
        if path.suffix in ('.yaml', '.yml'):
            data = yaml.safe_load(f) or {}
        elif path.suffix == '.json':
            data = json.load(f)
        else:
            logger.warning(f"Unknown config format: {path.suffix}")
            return GameConfig()

    return GameConfig.model_validate(data)
