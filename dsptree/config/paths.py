# dsptree/config/paths.py
import os
from pathlib import Path

def _get_app_name() -> str:
    return "dsptree"

def get_user_data_dir() -> Path:
    """Get the per-user directory holding config.json and logs."""
    override = os.environ.get("DSPTREE_CONFIG_DIR")
    if override:
        path = Path(override)
    elif os.environ.get("APPDATA"):
        # Windows, where the legacy projects usually live
        path = Path(os.environ["APPDATA"]) / _get_app_name()
    else:
        xdg_config = os.environ.get("XDG_CONFIG_HOME")
        base = Path(xdg_config) if xdg_config else Path.home() / ".config"
        path = base / _get_app_name()

    path.mkdir(parents=True, exist_ok=True)
    return path

def get_user_config_file() -> Path:
    """Get the path to the user's config.json file."""
    return get_user_data_dir() / "config.json"

def get_user_log_dir() -> Path:
    """Get the path to the user's log directory."""
    path = get_user_data_dir() / "logs"
    path.mkdir(parents=True, exist_ok=True)
    return path
