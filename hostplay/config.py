"""
Configuration - pacing delays and logging setup.

Pacing delays are purely cosmetic: they give humans time to see a die
roll, give bots an artificial thinking pause, and stagger automatic turn
resolution. None of them are part of the rules, so a headless deployment
can set them all to zero.

Environment variables:
    HOSTPLAY_ROLL_VIEW_DELAY    Seconds before an unplayable roll ends the turn
    HOSTPLAY_AUTO_MOVE_DELAY    Seconds before a single legal token moves itself
    HOSTPLAY_RACE_BOT_DELAY     Race bot thinking pause
    HOSTPLAY_SOWING_BOT_DELAY   Sowing bot thinking pause
    HOSTPLAY_AUTO_MOVE          "0" disables single-token auto-move
    HOSTPLAY_LOG_LEVEL          Logging level name (default INFO)
"""

from __future__ import annotations
from dataclasses import dataclass
import logging
import os


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or raw == "":
        return default
    return float(raw)


@dataclass(frozen=True)
class PacingConfig:
    """Cosmetic delays applied to automatic transitions."""
    roll_view_delay: float = 3.0
    auto_move_delay: float = 0.8
    race_bot_delay: float = 0.8
    sowing_bot_delay: float = 1.0

    # Auto-apply the move when a human has exactly one legal token
    auto_move_single_token: bool = True

    @classmethod
    def headless(cls, auto_move_single_token: bool = True) -> PacingConfig:
        """Zero-delay pacing for tests, simulations and the CLI."""
        return cls(
            roll_view_delay=0.0,
            auto_move_delay=0.0,
            race_bot_delay=0.0,
            sowing_bot_delay=0.0,
            auto_move_single_token=auto_move_single_token,
        )

    @classmethod
    def from_env(cls) -> PacingConfig:
        """Build pacing from HOSTPLAY_* environment variables."""
        defaults = cls()
        return cls(
            roll_view_delay=_env_float("HOSTPLAY_ROLL_VIEW_DELAY", defaults.roll_view_delay),
            auto_move_delay=_env_float("HOSTPLAY_AUTO_MOVE_DELAY", defaults.auto_move_delay),
            race_bot_delay=_env_float("HOSTPLAY_RACE_BOT_DELAY", defaults.race_bot_delay),
            sowing_bot_delay=_env_float("HOSTPLAY_SOWING_BOT_DELAY", defaults.sowing_bot_delay),
            auto_move_single_token=os.getenv("HOSTPLAY_AUTO_MOVE", "1") != "0",
        )


def configure_logging(level: str | None = None):
    """Configure root logging for CLI and server entry points."""
    level_name = (level or os.getenv("HOSTPLAY_LOG_LEVEL", "INFO")).upper()
    logging.basicConfig(
        level=getattr(logging, level_name, logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
