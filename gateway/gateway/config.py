"""Gateway settings, read from the environment (and ``.env``)."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

from gateway.ctx import RESOLVERS

_LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}


@dataclass(slots=True)
class Settings:
    host: str = "127.0.0.1"
    port: int = 8100
    log_level: str = "INFO"
    rpc_path: str = "/rpc"
    ctx: str = "root"

    def __post_init__(self) -> None:
        self.log_level = self.log_level.upper()
        if self.log_level not in _LOG_LEVELS:
            raise ValueError(f"invalid log level: {self.log_level!r}")
        if not 0 < self.port < 65536:
            raise ValueError(f"invalid port: {self.port}")
        if not self.rpc_path.startswith("/"):
            raise ValueError(f"rpc path must start with '/': {self.rpc_path!r}")
        if self.ctx not in RESOLVERS:
            raise ValueError(f"unknown ctx resolver {self.ctx!r}; expected one of {sorted(RESOLVERS)}")

    @property
    def log_level_no(self) -> int:
        return getattr(logging, self.log_level)

    @classmethod
    def from_env(cls, env_file: str | os.PathLike | None = None) -> "Settings":
        """Build settings from ``GATEWAY_*`` / ``LOG_LEVEL`` variables.

        *env_file* defaults to ``.env`` in the working directory; variables
        already set in the environment win.
        """
        load_dotenv(env_file or os.path.join(Path.cwd(), ".env"))
        port = os.getenv("GATEWAY_PORT", "8100")
        try:
            port_no = int(port)
        except ValueError:
            raise ValueError(f"invalid GATEWAY_PORT: {port!r}") from None
        return cls(
            host=os.getenv("GATEWAY_HOST", "127.0.0.1"),
            port=port_no,
            log_level=os.getenv("LOG_LEVEL", "INFO"),
            rpc_path=os.getenv("GATEWAY_RPC_PATH", "/rpc"),
            ctx=os.getenv("GATEWAY_CTX", "root"),
        )
