"""verilist Configuration — contract checking mode.

Loads configuration from ``.verilistrc.json`` (or ``verilist.config.json``)
found by walking up from the working directory, then applies the
``VERILIST_CONTRACTS`` environment variable and any programmatic override.

Example .verilistrc.json:
    {
      "mode": "all",
      "log_violations": true
    }

Modes:
    off       no contract is evaluated; explicit bounds checks still apply
    requires  preconditions only (default)
    all       preconditions, postconditions, purity and borrow frames
"""

from __future__ import annotations

import json
import os
from contextlib import contextmanager
from dataclasses import dataclass, replace
from typing import Any, Dict, Iterator, Optional


MODES = ("off", "requires", "all")

ENV_VAR = "VERILIST_CONTRACTS"


@dataclass
class ContractConfig:
    """Project-level contract checking configuration."""
    mode: str = "requires"
    log_violations: bool = True

    def __post_init__(self) -> None:
        if self.mode not in MODES:
            raise ValueError(f"Unknown contract mode {self.mode!r}; expected one of {MODES}")

    @property
    def check_requires(self) -> bool:
        return self.mode in ("requires", "all")

    @property
    def check_ensures(self) -> bool:
        return self.mode == "all"


# ---------------------------------------------------------------------------
# Config file names (in priority order)
# ---------------------------------------------------------------------------

_CONFIG_FILES = [
    ".verilistrc.json",
    "verilist.config.json",
]


def find_config(start_dir: str = ".") -> Optional[str]:
    """Find the nearest config file by walking up from start_dir."""
    current = os.path.abspath(start_dir)
    while True:
        for name in _CONFIG_FILES:
            path = os.path.join(current, name)
            if os.path.isfile(path):
                return path
        parent = os.path.dirname(current)
        if parent == current:
            break
        current = parent
    return None


def load_config(path: Optional[str] = None, start_dir: str = ".") -> ContractConfig:
    """Load configuration from a file, then apply the environment.

    If no path is given, searches for a config file starting from start_dir.
    A missing or unreadable file yields the defaults.
    """
    if path is None:
        path = find_config(start_dir)

    data: Dict[str, Any] = {}
    if path is not None:
        try:
            with open(path, "r") as f:
                data = json.load(f)
        except (IOError, OSError, json.JSONDecodeError):
            data = {}
        if not isinstance(data, dict):
            data = {}

    env_mode = os.environ.get(ENV_VAR)
    if env_mode:
        data["mode"] = env_mode.strip().lower()

    return _dict_to_config(data)


def _dict_to_config(data: Dict[str, Any]) -> ContractConfig:
    """Convert a parsed dict to ContractConfig."""
    config = ContractConfig()

    if "mode" in data:
        config = replace(config, mode=str(data["mode"]))
    if "log_violations" in data:
        config.log_violations = bool(data["log_violations"])

    return config


# ---------------------------------------------------------------------------
# Active configuration
# ---------------------------------------------------------------------------

_active: Optional[ContractConfig] = None


def get_config() -> ContractConfig:
    """Return the active configuration, loading it on first use."""
    global _active
    if _active is None:
        _active = load_config()
    return _active


def configure(mode: Optional[str] = None, log_violations: Optional[bool] = None) -> ContractConfig:
    """Override fields of the active configuration."""
    global _active
    config = get_config()
    if mode is not None:
        config = replace(config, mode=mode)
    if log_violations is not None:
        config = replace(config, log_violations=log_violations)
    _active = config
    return config


def reset_config() -> None:
    """Forget the active configuration so the next access reloads it."""
    global _active
    _active = None


@contextmanager
def contract_mode(mode: str) -> Iterator[ContractConfig]:
    """Temporarily switch the contract checking mode."""
    global _active
    previous = get_config()
    _active = replace(previous, mode=mode)
    try:
        yield _active
    finally:
        _active = previous
