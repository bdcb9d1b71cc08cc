from __future__ import annotations

import os
from pathlib import Path
from typing import Any


def _flag(name: str, default: str = "off") -> bool:
    value = os.getenv(name, default).strip().lower()
    return value in {"1", "true", "yes", "on"}


def shared_templates_dir(root_dir: Path) -> Path:
    env_path = os.getenv("ATLAS_SHARED_TEMPLATES")
    if env_path:
        return Path(env_path)
    return root_dir / "atlas" / "templates"


def configure_templates(templates: Any) -> None:
    if _flag("ATLAS_TEMPLATE_RELOAD", "on"):
        templates.env.auto_reload = True
        templates.env.cache = {}
