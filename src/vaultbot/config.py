from __future__ import annotations

import os
from dataclasses import dataclass


def _get_int(name: str, default: int) -> int:
    raw = os.getenv(name, "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def _get_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name, "").strip().lower()
    if not raw:
        return default
    return raw in {"1", "true", "yes", "y", "on"}


def _get_str(name: str, default: str) -> str:
    return os.getenv(name, default).strip() or default


@dataclass(frozen=True)
class Settings:
    token: str
    # 0 syncs commands globally; otherwise global commands are copied to this guild.
    sync_guild_id: int = 0
    # Wipe the global command set after a guild sync (stale registrations linger for up to an hour).
    clear_global_commands: bool = False
    log_level: str = "INFO"
    vouches_path: str = "vouches.json"
    sqlite_path: str = "vaultbot.sqlite3"
    persist_temp_bans: bool = True
    tempban_sweep_seconds: int = 60
    # Sticky repositioning only needs message events; the content itself is unused.
    message_content_intent: bool = True


def load_settings() -> Settings:
    token = os.getenv("DISCORD_TOKEN", "").strip()
    if not token:
        raise RuntimeError("DISCORD_TOKEN is required")
    return Settings(
        token=token,
        sync_guild_id=_get_int("SYNC_GUILD_ID", 0),
        clear_global_commands=_get_bool("CLEAR_GLOBAL_COMMANDS", False),
        log_level=_get_str("LOG_LEVEL", "INFO"),
        vouches_path=_get_str("VOUCHES_PATH", "vouches.json"),
        sqlite_path=_get_str("SQLITE_PATH", "vaultbot.sqlite3"),
        persist_temp_bans=_get_bool("PERSIST_TEMP_BANS", True),
        tempban_sweep_seconds=max(1, _get_int("TEMPBAN_SWEEP_SECONDS", 60)),
        message_content_intent=_get_bool("MESSAGE_CONTENT_INTENT", True),
    )
