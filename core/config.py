from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from typing import List, Mapping, Optional, Tuple


GRID_SIZE = 24
DRILL_PALETTE: Tuple[str, ...] = ("#8b5cf6", "#3b82f6", "#06b6d4", "#10b981")
DEFAULT_CORS_ORIGINS: Tuple[str, ...] = ("http://localhost:3000", "http://127.0.0.1:3000")
DEFAULT_LOG_LEVEL = "INFO"


@dataclass(frozen=True)
class Settings:
    cors_origins: List[str] = field(default_factory=lambda: list(DEFAULT_CORS_ORIGINS))
    log_level: str = DEFAULT_LOG_LEVEL


def load_settings(environ: Optional[Mapping[str, str]] = None) -> Settings:
    env = os.environ if environ is None else environ

    raw_origins = env.get("ABACUS_CORS_ORIGINS") or ""
    cors_origins = [o.strip() for o in raw_origins.split(",") if o.strip()]
    if not cors_origins:
        cors_origins = list(DEFAULT_CORS_ORIGINS)

    log_level = (env.get("ABACUS_LOG_LEVEL") or DEFAULT_LOG_LEVEL).strip().upper()
    if not isinstance(logging.getLevelName(log_level), int):
        log_level = DEFAULT_LOG_LEVEL

    return Settings(cors_origins=cors_origins, log_level=log_level)
