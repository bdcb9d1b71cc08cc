from __future__ import annotations

import logging
from importlib import import_module
from pathlib import Path
from typing import Any, Dict

from fastapi import FastAPI, HTTPException, Request
from fastapi.responses import HTMLResponse
from fastapi.templating import Jinja2Templates

from atlas.errors import ValidationNormalizeMiddleware
from atlas.registry import MODULES_PATH, load_modules
from atlas.settings import configure_templates, shared_templates_dir

logger = logging.getLogger(__name__)

ROOT_DIR = Path(__file__).parent.parent

CATEGORY_DESCRIPTIONS = {
    "Identifiers": "Inspect, decode and generate identifiers such as UUIDv7.",
    "Other": "Useful modules that do not fit a core category.",
}
DEFAULT_CATEGORY_DESCRIPTION = "Practical utilities for quick tasks."


def _slugify(value: str) -> str:
    return value.strip().lower().replace(" ", "-")


def build_categories(modules: Dict[str, Dict[str, Any]]) -> list[dict[str, Any]]:
    visible = [module for module in modules.values() if module.get("public", True)]
    grouped: dict[str, list[dict[str, Any]]] = {}
    for module in visible:
        category = module.get("category") or "Other"
        grouped.setdefault(str(category), []).append(module)

    categories: list[dict[str, Any]] = []
    for category, items in sorted(grouped.items(), key=lambda item: item[0].lower()):
        items.sort(key=lambda item: item.get("title") or item.get("name", ""))
        categories.append(
            {
                "name": category,
                "slug": _slugify(category),
                "description": CATEGORY_DESCRIPTIONS.get(
                    category, DEFAULT_CATEGORY_DESCRIPTION
                ),
                "modules": items,
            }
        )
    return categories


def import_attr(path: str) -> Any:
    if ":" not in path:
        raise ValueError(f"Invalid entrypoint '{path}'. Expected module:attr.")
    module_path, attr = path.split(":", 1)
    module = import_module(module_path)
    return getattr(module, attr)


def build_app(modules_path: Path = MODULES_PATH) -> FastAPI:
    app = FastAPI(title="Prefix Atlas")
    app.add_middleware(ValidationNormalizeMiddleware)

    templates = Jinja2Templates(directory=str(shared_templates_dir(ROOT_DIR)))
    configure_templates(templates)

    modules = load_modules(modules_path)

    @app.get("/", response_class=HTMLResponse)
    def atlas_index(request: Request):
        base_path = request.scope.get("root_path", "").rstrip("/")
        return templates.TemplateResponse(
            request,
            "index.html",
            {"categories": build_categories(modules), "base_path": base_path},
        )

    @app.get("/category/{slug}", response_class=HTMLResponse)
    def category_index(request: Request, slug: str):
        categories = build_categories(modules)
        category = next((item for item in categories if item["slug"] == slug), None)
        if not category:
            raise HTTPException(status_code=404, detail="Category not found")
        base_path = request.scope.get("root_path", "").rstrip("/")
        return templates.TemplateResponse(
            request,
            "category.html",
            {"category": category, "base_path": base_path},
        )

    for meta in modules.values():
        api_entry = (meta.get("entrypoints") or {}).get("api")
        if not api_entry:
            continue

        try:
            subapp = import_attr(api_entry)
        except Exception:
            logger.exception("Module %s failed to import; not mounted.", meta["name"])
            continue

        mount_path = meta.get("mount") or f"/{meta.get('slug', meta['name'])}"
        app.mount(mount_path, subapp)
        logger.info("Mounted %s at %s", meta["name"], mount_path)

    return app
