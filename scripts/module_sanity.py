#!/usr/bin/env python3
from __future__ import annotations

import sys
from pathlib import Path
from typing import Any, Dict, List

ROOT_DIR = Path(__file__).resolve().parents[1]
if str(ROOT_DIR) not in sys.path:
    sys.path.insert(0, str(ROOT_DIR))

from atlas.registry import MODULES_PATH, load_filesystem_modules  # noqa: E402

REQUIRED_FIELDS = ("title", "description", "category")


def _mount_from(name: str, raw: str | None) -> str:
    mount = raw or f"/{name.replace('_', '-')}"
    if not mount.startswith("/"):
        mount = "/" + mount
    if mount != "/" and mount.endswith("/"):
        mount = mount.rstrip("/")
    return mount


def check_module(meta: Dict[str, Any]) -> List[str]:
    name = meta["name"]
    errors: List[str] = []
    for field in REQUIRED_FIELDS:
        if not str(meta.get(field) or "").strip():
            errors.append(f"{name}: missing {field}")

    if meta.get("public", True):
        api = (meta.get("entrypoints") or {}).get("api")
        if not api:
            errors.append(f"{name}: missing entrypoints.api")
        elif ":" not in str(api):
            errors.append(f"{name}: entrypoints.api must be module:app")

        path = meta.get("path")
        if isinstance(path, Path):
            if not (path / "tool" / "app.py").exists():
                errors.append(f"{name}: missing tool/app.py")
            if not (path / "tool" / "templates" / "index.html").exists():
                errors.append(f"{name}: missing tool/templates/index.html")
            if not (path / "core").is_dir():
                errors.append(f"{name}: missing core/")
    return errors


def collect_errors(modules_dir: Path = MODULES_PATH) -> List[str]:
    errors: List[str] = []
    mounts: Dict[str, str] = {}
    for name, meta in sorted(load_filesystem_modules(modules_dir).items()):
        errors.extend(check_module(meta))

        mount = _mount_from(name, meta.get("mount"))
        if mount == "/":
            errors.append(f"{name}: mount '/' is reserved")
        if " " in mount:
            errors.append(f"{name}: mount contains spaces")
        if mount in mounts:
            errors.append(f"{name}: mount '{mount}' duplicates {mounts[mount]}")
        else:
            mounts[mount] = name
    return errors


def main() -> int:
    errors = collect_errors()
    if errors:
        print("Module sanity check failed:\n")
        for issue in errors:
            print(f"- {issue}")
        return 1

    print("Module sanity check passed.")
    return 0


if __name__ == "__main__":
    sys.exit(main())
