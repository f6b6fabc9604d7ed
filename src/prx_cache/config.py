from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class Config:
    db_default: str = "~/.prx_cache.duckdb"
    db_env: str = "PRX_CACHE_DB"
    fail_open_on_key_error: bool = False
