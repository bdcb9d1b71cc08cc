from __future__ import annotations

import logging
from importlib import metadata
from pathlib import Path
from typing import Any, Dict

import yaml

logger = logging.getLogger(__name__)

MODULES_PATH = Path(__file__).parent.parent / "modules"
ENTRYPOINT_GROUP = "atlas.modules"


def _normalize_module(
    data: Dict[str, Any],
    *,
    source: str,
    path: Path | None = None,
    entry_point: str | None = None,
) -> Dict[str, Any] | None:
    name = data.get("name")
    if not name:
        return None

    slug = data.get("slug") or name.replace("_", "-")
    mount = data.get("mount") or f"/{slug}"
    public = data.get("public")
    if public is None:
        public = True

    normalized = {**data}
    normalized.update(
        {
            "name": name,
            "slug": slug,
            "mount": mount,
            "public": bool(public),
            "source": source,
        }
    )

    if path is not None:
        normalized["path"] = path
    if entry_point is not None:
        normalized["entry_point"] = entry_point

    return normalized


def load_filesystem_modules(modules_path: Path = MODULES_PATH) -> Dict[str, Dict[str, Any]]:
    modules: Dict[str, Dict[str, Any]] = {}
    if not modules_path.exists():
        return modules

    for module_dir in sorted(modules_path.iterdir()):
        manifest = module_dir / "module.yaml"
        if not manifest.is_file():
            continue
        try:
            data = yaml.safe_load(manifest.read_text(encoding="utf-8")) or {}
        except yaml.YAMLError:
            logger.exception("Skipping %s: manifest is not valid YAML.", module_dir.name)
            continue
        if not isinstance(data, dict):
            logger.warning("Skipping %s: manifest must be a mapping.", module_dir.name)
            continue
        normalized = _normalize_module(data, source="filesystem", path=module_dir)
        if normalized:
            modules[normalized["name"]] = normalized
    return modules


def load_entrypoint_modules(group: str = ENTRYPOINT_GROUP) -> Dict[str, Dict[str, Any]]:
    modules: Dict[str, Dict[str, Any]] = {}
    for entry in metadata.entry_points(group=group):
        try:
            obj = entry.load()
        except Exception:
            logger.exception("Failed to load module entry point %s.", entry.name)
            continue

        data = obj() if callable(obj) else obj
        if not isinstance(data, dict):
            continue

        normalized = _normalize_module(data, source="entry_point", entry_point=entry.name)
        if normalized:
            modules[normalized["name"]] = normalized

    return modules


def load_modules(modules_path: Path = MODULES_PATH) -> Dict[str, Dict[str, Any]]:
    modules = load_filesystem_modules(modules_path)
    for name, data in load_entrypoint_modules().items():
        modules.setdefault(name, data)
    return modules
