# ABOUTME: Configuration manager for YAML scenario, strategy and settings files
# ABOUTME: Central config loading, validation and strategy parameter resolution

import os
import yaml
from pathlib import Path
from typing import Dict, Any, Optional, List


DEFAULT_SETTINGS = {
    "api": {
        "base_url": "https://berghain.challenges.listenlabs.ai",
        "player_id": "00000000-0000-0000-0000-000000000000",
        "timeout_seconds": 60,
        "max_retries": 6,
    },
    "game": {
        "venue_capacity": 1000,
        "max_rejections": 20000,
    },
    "logging": {
        "game_logs_dir": "game_logs",
        "sample_decisions": 100,
    },
}


def _load_yaml(path: Path) -> Optional[Dict[str, Any]]:
    try:
        with open(path, 'r') as f:
            return yaml.safe_load(f)
    except (yaml.YAMLError, FileNotFoundError):
        return None


class ConfigManager:
    """Manages configuration loading from YAML files."""

    def __init__(self, config_dir: str = None):
        if config_dir:
            self.config_dir = Path(config_dir)
        else:
            # Default to config directory relative to this file
            self.config_dir = Path(__file__).parent

        self.scenarios_dir = self.config_dir / "scenarios"
        self.strategies_dir = self.config_dir / "strategies"
        self.settings_file = self.config_dir / "settings.yaml"

    def get_scenario_config(self, scenario_id: int) -> Optional[Dict[str, Any]]:
        """Load scenario configuration by ID."""
        scenario_file = self.scenarios_dir / f"scenario_{scenario_id}.yaml"

        if not scenario_file.exists():
            return None

        config = _load_yaml(scenario_file)
        if config is None:
            return None

        # Add scenario ID to config
        config["scenario_id"] = scenario_id
        return config

    def load_scenario(self, scenario_id: int) -> Dict[str, Any]:
        """Like get_scenario_config, but a missing or malformed file is an error."""
        config = self.get_scenario_config(scenario_id)
        if config is None:
            raise FileNotFoundError(f"Scenario config not found for id={scenario_id} in {self.scenarios_dir}")
        if not self.validate_scenario_config(config):
            raise ValueError(f"Invalid scenario config for id={scenario_id}")
        return config

    def get_strategy_config(self, strategy_name: str) -> Optional[Dict[str, Any]]:
        """Load strategy configuration by name.

        Supports top-level names (e.g., "paced_feasible") and relative subpaths
        (e.g., "tuned/paced_feasible"), falling back to a filename-stem search.
        """
        try_paths = []
        rel_path = Path(strategy_name)
        if not rel_path.is_absolute() and len(rel_path.parts) > 1:
            if rel_path.suffix == '.yaml':
                try_paths.append(self.strategies_dir / rel_path)
            else:
                try_paths.append(self.strategies_dir / (rel_path.as_posix() + '.yaml'))

        try_paths.append(self.strategies_dir / f"{strategy_name}.yaml")

        for p in try_paths:
            if p.exists():
                cfg = _load_yaml(p)
                if cfg is not None:
                    return cfg

        target_stem = strategy_name.rsplit('.', 1)[0]
        for file in self.strategies_dir.rglob('*.yaml'):
            if file.stem == target_stem:
                cfg = _load_yaml(file)
                if cfg is not None:
                    return cfg

        return None

    def resolve_strategy(self, strategy_name: str, scenario_id: Optional[int] = None) -> Dict[str, Any]:
        """Return {'strategy': registry key, 'parameters': merged params} for a config name.

        Scenario-specific adjustments override the base parameters.
        """
        config = self.get_strategy_config(strategy_name)
        if config is None:
            raise FileNotFoundError(f"Strategy config '{strategy_name}' not found in {self.strategies_dir}")
        if not self.validate_strategy_config(config):
            raise ValueError(f"Invalid strategy config '{strategy_name}'")

        params = dict(config.get("parameters") or {})
        adjustments = config.get("scenario_adjustments") or {}
        if scenario_id is not None:
            params.update(adjustments.get(scenario_id) or adjustments.get(str(scenario_id)) or {})

        return {
            "name": config.get("name", strategy_name),
            "strategy": config["strategy"],
            "description": config.get("description", ""),
            "parameters": params,
        }

    def list_available_scenarios(self) -> List[int]:
        """List all available scenario IDs."""
        scenario_ids = []

        for file in self.scenarios_dir.glob("scenario_*.yaml"):
            try:
                scenario_ids.append(int(file.stem.split('_')[1]))
            except (ValueError, IndexError):
                continue

        return sorted(scenario_ids)

    def list_available_strategies(self) -> List[str]:
        """List available strategy names (top-level + subfolders, deduplicated)."""
        names: List[str] = []
        seen = set()

        for f in sorted(self.strategies_dir.glob('*.yaml')):
            if f.stem not in seen:
                seen.add(f.stem)
                names.append(f.stem)

        for f in sorted(self.strategies_dir.rglob('*.yaml')):
            if f.parent == self.strategies_dir:
                continue
            if f.stem not in seen:
                seen.add(f.stem)
                names.append(f.stem)

        return names

    def get_settings(self) -> Dict[str, Any]:
        """Load settings.yaml over the built-in defaults, then apply env overrides."""
        settings = {section: dict(values) for section, values in DEFAULT_SETTINGS.items()}
        loaded = _load_yaml(self.settings_file) if self.settings_file.exists() else None
        for section, values in (loaded or {}).items():
            if isinstance(values, dict):
                settings.setdefault(section, {}).update(values)

        if os.getenv("BOUNCER_BASE_URL"):
            settings["api"]["base_url"] = os.environ["BOUNCER_BASE_URL"]
        if os.getenv("BOUNCER_PLAYER_ID"):
            settings["api"]["player_id"] = os.environ["BOUNCER_PLAYER_ID"]
        return settings

    def validate_scenario_config(self, config: Dict[str, Any]) -> bool:
        """Validate scenario configuration structure."""
        required_fields = ["constraints", "expected_frequencies"]

        for field in required_fields:
            if field not in config:
                return False

        if not isinstance(config["constraints"], list):
            return False

        for constraint in config["constraints"]:
            if not isinstance(constraint, dict):
                return False
            if "attribute" not in constraint or "min_count" not in constraint:
                return False

        return isinstance(config["expected_frequencies"], dict)

    def validate_strategy_config(self, config: Dict[str, Any]) -> bool:
        """Validate strategy configuration structure."""
        return isinstance(config, dict) and "strategy" in config
