"""Engine settings: YAML config + env var overrides.

Priority: env var > YAML file > default.
Env vars use CAUSALBN_{FIELD_NAME} convention (e.g. CAUSALBN_N_SAMPLES=50000).
YAML file default: ~/.causalbn/settings.yaml

Library functions take these values as explicit arguments; only the CLI
and ``CausalQueryEngine.from_settings`` read the singleton.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any

import yaml

_DEFAULT_PATH = Path("~/.causalbn/settings.yaml").expanduser()
_NONE = {"", "none", "null"}


@dataclass
class EngineSettings:
    # Dirichlet pseudocount for fit_bayesian
    prior_pseudocount: float = 1.0
    # Likelihood-weighting samples per query
    n_samples: int = 10_000
    # Seed for sampling/inference; None draws fresh entropy
    seed: int | None = None
    # Row-sum tolerance when validating user-supplied CPTs
    cpt_tolerance: float = 1e-6
    # Alpha for CI tests and DAG refutation
    significance_level: float = 0.05
    # "mi" (G-test) or "x2" (Pearson)
    ci_method: str = "mi"

    @classmethod
    def load(cls, path: Path | None = None) -> EngineSettings:
        """Load settings from YAML file, then override with env vars."""
        file_path = path or _DEFAULT_PATH
        file_values: dict[str, Any] = {}

        if file_path.exists():
            raw = yaml.safe_load(file_path.read_text()) or {}
            if isinstance(raw, dict):
                file_values = {k: v for k, v in raw.items() if k in _FIELD_NAMES}

        kwargs: dict[str, Any] = {}
        for f in fields(cls):
            env_key = f"CAUSALBN_{f.name.upper()}"
            if env_key in os.environ:
                kwargs[f.name] = _coerce(f.name, os.environ[env_key])
            elif f.name in file_values:
                kwargs[f.name] = _coerce(f.name, file_values[f.name])

        settings = cls(**kwargs)
        settings.validate()
        return settings

    def validate(self) -> None:
        if not self.prior_pseudocount > 0:
            raise ValueError(f"prior_pseudocount must be > 0, got {self.prior_pseudocount}")
        if self.n_samples <= 0:
            raise ValueError(f"n_samples must be > 0, got {self.n_samples}")
        if not 0 < self.significance_level < 1:
            raise ValueError(f"significance_level must be in (0, 1), got {self.significance_level}")
        if not self.cpt_tolerance >= 0:
            raise ValueError(f"cpt_tolerance must be >= 0, got {self.cpt_tolerance}")
        if self.ci_method not in ("mi", "x2"):
            raise ValueError(f"ci_method must be 'mi' or 'x2', got {self.ci_method!r}")

    def to_dict(self) -> dict[str, Any]:
        return {f.name: getattr(self, f.name) for f in fields(self)}


_FIELD_NAMES = {f.name for f in fields(EngineSettings)}
_CASTS = {
    "prior_pseudocount": float,
    "n_samples": int,
    "seed": int,
    "cpt_tolerance": float,
    "significance_level": float,
    "ci_method": str,
}


def _coerce(name: str, value: Any) -> Any:
    if name == "seed" and (value is None or str(value).strip().lower() in _NONE):
        return None
    try:
        return _CASTS[name](value)
    except (TypeError, ValueError) as err:
        raise ValueError(f"Invalid value for {name}: {value!r}") from err


# Singleton
_settings: EngineSettings | None = None


def get_settings(path: Path | None = None) -> EngineSettings:
    """Get the singleton EngineSettings instance."""
    global _settings
    if _settings is None:
        _settings = EngineSettings.load(path)
    return _settings


def reset_settings() -> None:
    """Reset for testing."""
    global _settings
    _settings = None
