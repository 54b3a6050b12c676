"""Environment-based configuration for trello2vectors."""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path


def load_env_file(path: str, environ: dict[str, str] | None = None) -> int:
    """Load KEY=VALUE lines from a .env file into the environment.

    Existing variables are never overridden. Blank lines and ``#`` comments
    are ignored, and surrounding quotes on values are stripped.

    Returns:
        Number of variables that were set
    """
    target = os.environ if environ is None else environ
    env_path = Path(path)
    if not env_path.exists():
        return 0

    loaded = 0
    with open(env_path) as f:
        for line in f:
            line = line.strip()
            if not line or line.startswith("#") or "=" not in line:
                continue
            key, value = line.split("=", 1)
            key = key.strip()
            value = value.strip().strip("'\"")
            if key and key not in target:
                target[key] = value
                loaded += 1
    return loaded


@dataclass
class ImportConfig:
    """Credentials and endpoints needed to run an import"""

    trello_api_key: str | None = None
    trello_token: str | None = None
    board_id: str | None = None
    board_url: str | None = None
    supabase_url: str | None = None
    supabase_key: str | None = None
    supabase_access_token: str | None = None
    user_id: str | None = None

    REQUIRED = {
        "trello_api_key": "TRELLO_API_KEY",
        "trello_token": "TRELLO_TOKEN",
        "supabase_url": "SUPABASE_URL",
        "supabase_key": "SUPABASE_KEY",
        "user_id": "VECTORS_USER_ID",
    }

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> ImportConfig:
        env = os.environ if environ is None else environ
        return cls(
            trello_api_key=env.get("TRELLO_API_KEY") or None,
            trello_token=env.get("TRELLO_TOKEN") or None,
            board_id=env.get("TRELLO_BOARD_ID") or None,
            board_url=env.get("TRELLO_BOARD_URL") or None,
            supabase_url=env.get("SUPABASE_URL") or None,
            supabase_key=env.get("SUPABASE_KEY") or None,
            supabase_access_token=env.get("SUPABASE_ACCESS_TOKEN") or None,
            user_id=env.get("VECTORS_USER_ID") or None,
        )

    def missing(self, include_store: bool = True) -> list[str]:
        """Names of required environment variables that are not set"""
        names = []
        for attr, env_name in self.REQUIRED.items():
            if not include_store and attr in ("supabase_url", "supabase_key"):
                continue
            if not getattr(self, attr):
                names.append(env_name)
        return names
