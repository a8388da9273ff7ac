"""
Runtime configuration for the nerts bot.

Defaults match the live game. Every field can be overridden through a
``NERTS_<FIELD>`` environment variable (read after ``load_dotenv()``, so a
local ``.env`` file works too), and the CLI can override again on top.
"""

import os
from dataclasses import dataclass, fields
from typing import Tuple

from dotenv import load_dotenv

ENV_PREFIX = "NERTS_"


@dataclass
class BotConfig:
    """
    Configuration for the bot runtime and decision engine.

    Attributes:
        to_client_channel: Channel the server sends snapshots on.
        to_server_channel: Channel the bot sends intents on.
        receive_buffer_size: Largest datagram read from the transport.
        send_interval: Seconds between unsolicited intent sends.
        poll_interval: Seconds to sleep when no datagram is available.
        wait_timeout: Safety timeout for every post-condition wait.
        idle_timeout: Longest wait for a new tick at the top of each iteration.
        jitter_x: Half-open range of the x offset added to click targets.
        jitter_y: Half-open range of the y offset added to click targets.
        draw_area_x: Half-open x range for the random cursor when drawing.
        draw_area_y: Half-open y range for the random cursor when drawing.
        cosmetic_choices: Number of card backs / card colors to pick from.
    """
    to_client_channel: int = 1
    to_server_channel: int = 2
    receive_buffer_size: int = 0x1000
    send_interval: float = 0.1
    poll_interval: float = 0.01
    wait_timeout: float = 5.0
    idle_timeout: float = 0.5
    jitter_x: Tuple[int, int] = (10, 50)
    jitter_y: Tuple[int, int] = (10, 80)
    draw_area_x: Tuple[int, int] = (200, 3800)
    draw_area_y: Tuple[int, int] = (200, 2200)
    cosmetic_choices: int = 12

    def __post_init__(self):
        for name in ("jitter_x", "jitter_y", "draw_area_x", "draw_area_y"):
            low, high = getattr(self, name)
            if low >= high:
                raise ValueError(f"{name} must be a non-empty range, got ({low}, {high})")
        if self.wait_timeout <= 0:
            raise ValueError(f"wait_timeout must be positive, got {self.wait_timeout}")
        if self.cosmetic_choices < 1:
            raise ValueError(f"cosmetic_choices must be at least 1, got {self.cosmetic_choices}")

    @classmethod
    def from_env(cls, **overrides) -> "BotConfig":
        """Build a config from ``NERTS_*`` environment variables.

        Range fields are written as ``low,high``. Keyword overrides win over
        the environment.

        Raises:
            ValueError: If a variable cannot be converted.
        """
        load_dotenv()

        values = {}
        for f in fields(cls):
            raw = os.getenv(ENV_PREFIX + f.name.upper())
            if raw is None:
                continue
            default = f.default
            if isinstance(default, tuple):
                parts = [p.strip() for p in raw.split(",")]
                if len(parts) != 2:
                    raise ValueError(f"{ENV_PREFIX}{f.name.upper()} must be 'low,high', got {raw!r}")
                values[f.name] = (int(parts[0]), int(parts[1]))
            elif isinstance(default, float):
                values[f.name] = float(raw)
            else:
                values[f.name] = int(raw, 0)

        values.update({k: v for k, v in overrides.items() if v is not None})
        return cls(**values)


__all__ = ['BotConfig', 'ENV_PREFIX']
