"""
Golden PCA Configuration
========================
All thresholds for the covariance and QR-iteration stages.
Single source of truth. The solver, the batch runner and the CLI read it.

Usage:
    from goldenpca.config import CONFIG, SolveOptions
    threshold = CONFIG['eigen']['zero_threshold']
    options = SolveOptions.from_config(benchmark=True)

YAML overrides (same nesting, any subset of keys):
    eigen:
      zero_threshold: 1.0e-10
"""

import copy
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml


CONFIG = {

    # =================================================================
    # Covariance
    # =================================================================
    'covariance': {
        # False keeps the undivided Gram product AᵗA the accelerated
        # design is validated against. True divides by (samples - 1).
        'normalize': False,
    },

    # =================================================================
    # Shifted QR iteration
    # =================================================================
    'eigen': {
        'zero_threshold': 1e-8,         # |x| below this counts as deflated
        'shift_damping': 0.99,          # fraction of the Wilkinson shift applied
        'iteration_factor': 16,         # bound = features² × factor
    },

    # =================================================================
    # Random input generation
    # =================================================================
    'generator': {
        'low': -1.0,
        'high': 1.0,
        'seed': None,
    },
}


def _deep_merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(base.get(key), dict):
            _deep_merge(base[key], value)
        else:
            base[key] = value
    return base


def load_config(path) -> Dict[str, Any]:
    """
    Load a YAML override file on top of a copy of CONFIG.

    Missing keys keep their defaults. An empty file yields the defaults.
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {path}")
    with open(path) as f:
        try:
            override = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ValueError(f"Config file {path} is not valid YAML: {e}") from e
    if not isinstance(override, dict):
        raise ValueError(f"Config file {path} must contain a mapping, got {type(override).__name__}")

    config = _deep_merge(copy.deepcopy(CONFIG), override)
    errors = validate_config(config)
    if errors:
        raise ValueError(f"Invalid config {path}: " + "; ".join(errors))
    return config


def get_threshold(path: str, default=None, config: Optional[Dict[str, Any]] = None):
    """
    Get a config value by dot-notation path.

    Example:
        get_threshold('eigen.zero_threshold')   # Returns 1e-8
        get_threshold('eigen.missing', 0.5)     # Returns 0.5
    """
    value = CONFIG if config is None else config
    for key in path.split('.'):
        if isinstance(value, dict) and key in value:
            value = value[key]
        else:
            return default
    return value


def validate_config(config: Optional[Dict[str, Any]] = None) -> List[str]:
    """Check config for internal consistency."""
    config = CONFIG if config is None else config
    errors = []

    for section, defaults in CONFIG.items():
        values = config.get(section, {})
        if not isinstance(values, dict):
            errors.append(f"{section} must be a mapping")
            continue
        for key in values:
            if key not in defaults:
                errors.append(f"{section}.{key} is not a known setting")
    if errors:
        return errors

    eigen = config.get('eigen', {})

    if not eigen.get('zero_threshold', 0) >= 0:
        errors.append("eigen.zero_threshold must be >= 0")

    damping = eigen.get('shift_damping', 0)
    if not 0 < damping <= 1:
        errors.append("eigen.shift_damping must be in (0, 1]")

    factor = eigen.get('iteration_factor', 0)
    if not isinstance(factor, int) or isinstance(factor, bool) or factor < 1:
        errors.append("eigen.iteration_factor must be a positive integer")

    gen = config.get('generator', {})
    if gen.get('low', 0) >= gen.get('high', 1):
        errors.append("generator.low must be < generator.high")

    return errors


@dataclass
class SolveOptions:
    """Per-solve knobs for the shifted QR iteration."""
    enforce_iteration_bound: bool = True
    zero_threshold: float = CONFIG['eigen']['zero_threshold']
    shift_damping: float = CONFIG['eigen']['shift_damping']
    iteration_factor: int = CONFIG['eigen']['iteration_factor']

    def iteration_limit(self, features: int) -> int:
        return features * features * self.iteration_factor

    @classmethod
    def from_config(
        cls,
        config: Optional[Dict[str, Any]] = None,
        benchmark: bool = False,
    ) -> 'SolveOptions':
        """Build options from a CONFIG-shaped dict. Benchmark mode lifts the bound."""
        return cls(
            enforce_iteration_bound=not benchmark,
            zero_threshold=float(get_threshold('eigen.zero_threshold', cls.zero_threshold, config)),
            shift_damping=float(get_threshold('eigen.shift_damping', cls.shift_damping, config)),
            iteration_factor=int(get_threshold('eigen.iteration_factor', cls.iteration_factor, config)),
        )
