from __future__ import annotations

import logging
from importlib import resources
from pathlib import Path
from typing import List, Optional

import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator

from .errors import SettingsError

logger = logging.getLogger(__name__)


class CombatSettings(BaseModel):
    crit_chance: float = Field(0.1, ge=0.0, le=1.0, description="Probability of a critical hit")
    crit_multiplier: int = Field(2, ge=1, description="Damage multiplier on a critical hit")
    mitigation_factor: float = Field(0.5, ge=0.0, description="Fraction of defense subtracted from damage")


class AISettings(BaseModel):
    flee_threshold: float = Field(0.2, ge=0.0, le=1.0, description="Health ratio below which adversaries flee")
    chase_distance: int = Field(5, ge=0, description="Distance at which wanderers start chasing")
    ranged_range: int = Field(3, ge=1, description="Attack range for ranged adversaries")
    boss_phase_length: int = Field(3, ge=1, description="Turns per boss chase/ranged phase")


class PlayerSettings(BaseModel):
    inventory_capacity: int = Field(20, ge=1)
    starting_gold: int = Field(0, ge=0)
    starting_items: List[str] = Field(default_factory=lambda: ["wooden_sword", "health_potion"])
    starting_weapon: Optional[str] = "wooden_sword"
    starting_armor: Optional[str] = None

    @field_validator("starting_items")
    @classmethod
    def ensure_list(cls, v: List[str]) -> List[str]:
        return list(v or [])


class WorldSettings(BaseModel):
    map: str = Field("overworld.yaml", description="Packaged map resource name or a filesystem path")
    shop_stock: List[str] = Field(default_factory=lambda: ["health_potion"])


class Settings(BaseModel):
    seed: Optional[int] = None
    combat: CombatSettings = Field(default_factory=CombatSettings)
    ai: AISettings = Field(default_factory=AISettings)
    player: PlayerSettings = Field(default_factory=PlayerSettings)
    world: WorldSettings = Field(default_factory=WorldSettings)

    @staticmethod
    def _load_yaml(path: Path) -> dict:
        with path.open("r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
        if not isinstance(data, dict):
            raise SettingsError(f"Settings file {path} must contain a mapping at top level")
        return data

    @classmethod
    def _deep_merge(cls, base: dict, overlay: dict) -> dict:
        merged = dict(base)
        for k, v in (overlay or {}).items():
            if isinstance(v, dict) and isinstance(base.get(k), dict):
                merged[k] = cls._deep_merge(base[k], v)
            else:
                merged[k] = v
        return merged

    @classmethod
    def from_dict(cls, data: dict) -> "Settings":
        try:
            return cls.model_validate(data)
        except ValidationError as exc:
            raise SettingsError(f"Invalid settings: {exc}") from exc

    @classmethod
    def load(cls, user_path: Optional[Path] = None, **overrides) -> "Settings":
        """Load settings from built-in defaults and an optional user override file.

        Keyword overrides (e.g. ``seed=7``) are applied last; ``None`` values are ignored.
        """
        try:
            text = resources.files("tilequest.config").joinpath("default_settings.yaml").read_text(encoding="utf-8")
            default_data = yaml.safe_load(text) or {}
        except FileNotFoundError:
            logger.warning("Default settings not found; falling back to model defaults.")
            default_data = cls().model_dump()

        user_data: dict = {}
        if user_path is not None:
            if user_path.exists():
                user_data = cls._load_yaml(user_path)
                logger.info("Loaded user settings from %s", user_path)
            else:
                logger.warning("User settings file not found: %s", user_path)

        merged = cls._deep_merge(default_data, user_data)
        merged = cls._deep_merge(merged, {k: v for k, v in overrides.items() if v is not None})
        settings = cls.from_dict(merged)
        logger.debug("Settings merged: %s", settings)
        return settings
