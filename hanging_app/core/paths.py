from __future__ import annotations
import os
import secrets
from datetime import datetime
from pathlib import Path
from typing import Optional

APP_NAME = "ArtHangingToolbox"

def user_data_dir() -> Path:
    """
    Writable location for logs/settings/run packages. Never the code folder.
    Windows default: %LOCALAPPDATA%\\ArtHangingToolbox\\
    """
    base = os.environ.get("LOCALAPPDATA") or os.environ.get("APPDATA") or str(Path.home())
    p = Path(base) / APP_NAME
    p.mkdir(parents=True, exist_ok=True)
    return p

def logs_dir() -> Path:
    p = user_data_dir() / "logs"
    p.mkdir(parents=True, exist_ok=True)
    return p

def settings_path() -> Path:
    return user_data_dir() / "settings.json"

def runs_dir(tool_id: str) -> Path:
    p = user_data_dir() / tool_id / "runs"
    p.mkdir(parents=True, exist_ok=True)
    return p

def create_run_dir(tool_id: str, input_hash: Optional[str] = None) -> Path:
    """
    New, empty run package folder: <user data>/<tool_id>/runs/<YYYYmmdd_HHMMSS>_<hash6><rand>/

    Runs of equal inputs share the hash prefix; the random tail separates runs
    started within the same second.
    """
    ts = datetime.now().strftime("%Y%m%d_%H%M%S")
    prefix = (input_hash or "")[:6]
    root = runs_dir(tool_id)
    while True:
        p = root / f"{ts}_{prefix}{secrets.token_hex(2)}"
        try:
            p.mkdir(parents=False, exist_ok=False)
            return p
        except FileExistsError:
            continue
