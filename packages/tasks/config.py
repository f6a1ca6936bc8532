"""Configuration: loads from env vars first, then <TODO_HOME>/config.yaml fallback."""

import os
from pathlib import Path

import yaml

DEFAULT_BACKEND = "sqlite"
DEFAULT_LOCAL_USER = "local"
DATABASE_NAME = "todo_app_database.db"


def get_todo_dir() -> Path:
    return Path(os.environ.get("TODO_HOME") or Path.home() / ".todo")


def get_config_path() -> Path:
    return get_todo_dir() / "config.yaml"


def _load_yaml(path: Path) -> dict:
    if path.exists():
        with open(path) as f:
            return yaml.safe_load(f) or {}
    return {}


_yaml_cache: dict | None = None


def get_config() -> dict:
    global _yaml_cache
    if _yaml_cache is None:
        _yaml_cache = _load_yaml(get_config_path())
    return _yaml_cache


def reset_config() -> None:
    """Forget the cached YAML so the next read goes back to disk."""
    global _yaml_cache
    _yaml_cache = None


def get_backend() -> str:
    return os.environ.get("TODO_BACKEND") or get_config().get("backend", DEFAULT_BACKEND)


def get_supabase_url() -> str:
    url = os.environ.get("SUPABASE_URL") or get_config().get("supabase", {}).get("url", "")
    if not url:
        raise SystemExit(
            f"Error: No Supabase URL. Set SUPABASE_URL env var or add supabase.url to {get_config_path()}"
        )
    return url


def get_supabase_key() -> str:
    key = (
        os.environ.get("SUPABASE_ANON_KEY")
        or os.environ.get("SUPABASE_KEY")
        or get_config().get("supabase", {}).get("key", "")
    )
    if not key:
        raise SystemExit(
            f"Error: No Supabase key. Set SUPABASE_ANON_KEY env var or add supabase.key to {get_config_path()}"
        )
    return key


def get_database_path() -> Path:
    path = os.environ.get("TODO_DB_PATH") or get_config().get("local", {}).get("db_path")
    if path:
        return Path(path).expanduser()
    return get_todo_dir() / DATABASE_NAME


def get_local_user_id() -> str:
    return str(get_config().get("local", {}).get("user_id", DEFAULT_LOCAL_USER))


def get_session_path() -> Path:
    return get_todo_dir() / "session.json"
