"""
Search Configuration System

Centralized configuration for ISMCTS searches.
"""

import json
import math
from dataclasses import dataclass, asdict
from typing import Dict, Any, Optional


@dataclass
class SearchConfig:
    """Configuration for an ISMCTS search."""

    # UCT exploration constant (sqrt(2) = classical UCB1 balance)
    exploration_constant: float = math.sqrt(2)

    # Expected tree size per search; the arena grows past it if needed
    default_capacity: int = 500_000

    # Budget
    time_budget_ms: int = 1000
    check_interval: int = 2048  # Iterations between wall-clock checks
    max_simulations: Optional[int] = None  # None = bounded by time only

    def to_dict(self) -> Dict[str, Any]:
        """Search settings as a plain dict, ready for JSON."""
        return asdict(self)

    @classmethod
    def from_dict(cls, config_dict: Dict[str, Any]) -> 'SearchConfig':
        """
        Build search settings from a dict.

        Keys that are not SearchConfig fields are ignored, so a larger
        experiment config can be passed in whole. Missing keys keep their
        defaults.

        Args:
            config_dict: Field name to value mapping

        Returns:
            SearchConfig instance (not validated)
        """
        valid_keys = {f.name for f in cls.__dataclass_fields__.values()}
        filtered_dict = {k: v for k, v in config_dict.items() if k in valid_keys}
        return cls(**filtered_dict)

    @classmethod
    def from_file(cls, filepath: str) -> 'SearchConfig':
        """Load search settings saved by save()."""
        with open(filepath, 'r') as f:
            config_dict = json.load(f)
        return cls.from_dict(config_dict)

    def save(self, filepath: str):
        """
        Write search settings to a JSON file.

        Args:
            filepath: Destination path; overwritten if it exists
        """
        with open(filepath, 'w') as f:
            json.dump(self.to_dict(), f, indent=2)

    def validate(self) -> bool:
        """
        Validate configuration values.

        Returns:
            True if config is valid

        Raises:
            ValueError: If config values are invalid
        """
        if not math.isfinite(self.exploration_constant) or self.exploration_constant < 0:
            raise ValueError(
                f"exploration_constant must be a non-negative finite number, "
                f"got {self.exploration_constant}"
            )

        if self.default_capacity <= 0:
            raise ValueError(
                f"default_capacity must be positive, got {self.default_capacity}"
            )

        if self.time_budget_ms < 0:
            raise ValueError(
                f"time_budget_ms must be non-negative, got {self.time_budget_ms}"
            )

        if self.check_interval <= 0:
            raise ValueError(
                f"check_interval must be positive, got {self.check_interval}"
            )

        if self.max_simulations is not None and self.max_simulations < 0:
            raise ValueError(
                f"max_simulations must be non-negative or None, got {self.max_simulations}"
            )

        return True

    def __str__(self) -> str:
        """String representation of config."""
        cap = "unlimited" if self.max_simulations is None else str(self.max_simulations)
        lines = ["Search Configuration:"]
        lines.append(f"  UCT: c={self.exploration_constant:.4f}")
        lines.append(f"  Budget: {self.time_budget_ms} ms, max simulations {cap}")
        lines.append(f"  Clock check every {self.check_interval} iterations")
        lines.append(f"  Arena capacity: {self.default_capacity} nodes")
        return "\n".join(lines)


def get_fast_config() -> SearchConfig:
    """
    Get a fast search config for testing/debugging.

    Returns:
        SearchConfig with a small arena and a short budget
    """
    return SearchConfig(
        default_capacity=10_000,
        time_budget_ms=50,
        check_interval=64,
    )


def get_default_config() -> SearchConfig:
    """
    Get the default search config.

    Returns:
        SearchConfig with default values
    """
    return SearchConfig()  # Uses defaults
