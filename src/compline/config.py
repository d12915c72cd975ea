"""
Configuration management for compline.

Loads settings from environment variables (and an optional .env file) and
provides configuration objects.
"""

import os
from dataclasses import dataclass
from typing import Optional

from dotenv import load_dotenv

MATCH_MODES = ("fuzzy", "ignorecase", "smartcase", "case")


@dataclass
class CompletionConfig:
    """compline configuration."""

    match_mode: str = "case"
    trigger_delay_ms: int = 25
    initial_rtt_ms: float = 50.0
    rtt_window: int = 10
    rtt_warmup: int = 10
    log_level: str = "INFO"
    log_dir: Optional[str] = None
    enable_logging: bool = False

    @classmethod
    def from_env(cls) -> "CompletionConfig":
        """Initialize config from environment variables."""
        match_mode = os.getenv("COMPLINE_MATCH_MODE", "case").lower()
        if match_mode not in MATCH_MODES:
            raise ValueError(
                f"COMPLINE_MATCH_MODE must be one of {', '.join(MATCH_MODES)}, got {match_mode!r}"
            )
        return cls(
            match_mode=match_mode,
            trigger_delay_ms=int(os.getenv("COMPLINE_TRIGGER_DELAY_MS", "25")),
            initial_rtt_ms=float(os.getenv("COMPLINE_INITIAL_RTT_MS", "50")),
            rtt_window=int(os.getenv("COMPLINE_RTT_WINDOW", "10")),
            rtt_warmup=int(os.getenv("COMPLINE_RTT_WARMUP", "10")),
            log_level=os.getenv("COMPLINE_LOG_LEVEL", "INFO"),
            log_dir=os.getenv("COMPLINE_LOG_DIR"),
            enable_logging=os.getenv("COMPLINE_LOGGING", "false").lower() == "true",
        )


def load_config(dotenv_path: Optional[str] = None) -> CompletionConfig:
    """
    Load configuration, reading a .env file first.

    Args:
        dotenv_path: Optional explicit .env path (default: search from cwd)

    Returns:
        CompletionConfig built from the environment
    """
    load_dotenv(dotenv_path)
    return CompletionConfig.from_env()
