from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Optional

SOURCE_EXTENSION = ".java"

# mirrors cir.model.EntryPointPolicy
ENTRY_POINT_POLICIES = ("last", "first", "fail")
ENTRY_POINT_POLICY = os.getenv("ENTRY_POINT_POLICY", "last").strip().lower()
if ENTRY_POINT_POLICY not in ENTRY_POINT_POLICIES:
    raise ValueError(
        f"ENTRY_POINT_POLICY must be one of {', '.join(ENTRY_POINT_POLICIES)}, got {ENTRY_POINT_POLICY!r}"
    )

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"

CORS_ORIGINS = [
    o.strip()
    for o in os.getenv("CORS_ORIGINS", "http://localhost:5173,http://localhost:3000").split(",")
    if o.strip()
]

SERVICE_URL = os.getenv("MULTICLASS_CORE_URL", "http://127.0.0.1:7075")


def get_submissions_folder() -> Path:
    """
    Folder holding merged submission files. Read on every call so a changed
    environment (or .env) is picked up without a restart.
    """
    folder = os.getenv("SUBMISSIONS_FOLDER", "").strip()
    if not folder:
        return Path.home() / "lambdachecker"
    return Path(folder).expanduser()


def setup_logging(level: Optional[str] = None, log_file: Optional[str] = None) -> None:
    handlers: list[logging.Handler] = [logging.StreamHandler()]
    if log_file:
        Path(log_file).parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(log_file, encoding="utf-8"))
    logging.basicConfig(
        level=getattr(logging, (level or LOG_LEVEL), logging.INFO),
        format=LOG_FORMAT,
        handlers=handlers,
    )
