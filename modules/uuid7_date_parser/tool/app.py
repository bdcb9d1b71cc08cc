from __future__ import annotations

import logging
from datetime import tzinfo
from pathlib import Path
from typing import Any, Dict

from fastapi import FastAPI, Form, Request
from fastapi.responses import HTMLResponse, JSONResponse
from fastapi.templating import Jinja2Templates

from modules.uuid7_date_parser.core.codec import iso_utc, now_timestamp
from modules.uuid7_date_parser.core.config import ParserConfig, load_config, resolve_timezone
from modules.uuid7_date_parser.core.errors import PrefixAtlasError, RandomnessUnavailable
from modules.uuid7_date_parser.core.generate import generate_uuid7
from modules.uuid7_date_parser.core.monthly import (
    build_calendar,
    calendar_prefixes,
    min_unique_prefix_length,
)
from modules.uuid7_date_parser.core.parse import parse_uuid
from modules.uuid7_date_parser.core.references import build_references
from modules.uuid7_date_parser.core.transitions import WIDTHS, scan_transitions
from atlas.errors import ValidationNormalizeMiddleware
from atlas.settings import configure_templates, shared_templates_dir

logger = logging.getLogger(__name__)

app = FastAPI(title="UUIDv7 Date Parser")
app.add_middleware(ValidationNormalizeMiddleware)

BASE_DIR = Path(__file__).parent
ROOT_DIR = BASE_DIR.parents[2]
SHARED_TEMPLATES = shared_templates_dir(ROOT_DIR)

templates = Jinja2Templates(
    directory=[str(BASE_DIR / "templates"), str(SHARED_TEMPLATES)]
)
configure_templates(templates)


class UnknownTimezone(ValueError):
    pass


def _error(exc: PrefixAtlasError) -> JSONResponse:
    status_code = 503 if isinstance(exc, RandomnessUnavailable) else 400
    return JSONResponse({"error": exc.detail, "code": exc.code}, status_code=status_code)


def _timezone(name: str | None, config: ParserConfig) -> tzinfo | None:
    try:
        return resolve_timezone(name or config.timezone)
    except ValueError as exc:
        logger.warning("Rejected time zone %r.", name)
        raise UnknownTimezone(str(exc)) from exc


def _unknown_timezone() -> JSONResponse:
    return JSONResponse({"error": "Unknown time zone."}, status_code=400)


@app.get("/", response_class=HTMLResponse)
def index(request: Request):
    base_path = request.url.path.rstrip("/")
    config = load_config()
    return templates.TemplateResponse(
        request,
        "index.html",
        {
            "base_path": base_path,
            "refresh_seconds": config.refresh_seconds,
            "scan_start": f"{config.scan_start:04x}",
            "scan_end": f"{config.scan_end:04x}",
            "start_year": config.calendar_start_year,
            "end_year": config.calendar_end_year,
        },
    )


@app.post("/parse")
def parse(uuid: str | None = Form(None), tz: str | None = Form(None)):
    config = load_config()
    try:
        zone = _timezone(tz, config)
    except UnknownTimezone:
        return _unknown_timezone()
    table = scan_transitions(config.scan_start, config.scan_end)
    try:
        return parse_uuid(uuid or "", tz=zone, transitions=table)
    except PrefixAtlasError as exc:
        return _error(exc)


@app.get("/references")
def references(tz: str | None = None):
    config = load_config()
    try:
        zone = _timezone(tz, config)
    except UnknownTimezone:
        return _unknown_timezone()
    now = now_timestamp()
    try:
        entries = build_references(now, zone)
    except PrefixAtlasError as exc:
        return _error(exc)
    return {
        "now": now,
        "now_iso": iso_utc(now),
        "refresh_seconds": config.refresh_seconds,
        "references": [entry.to_dict() for entry in entries],
    }


@app.get("/transitions")
def transitions(digits: int | None = None):
    if digits is not None and digits not in WIDTHS:
        return JSONResponse({"error": "Digits must be 3 or 4."}, status_code=400)
    config = load_config()
    table = scan_transitions(config.scan_start, config.scan_end)
    payload: Dict[str, Any] = {
        "start": f"{config.scan_start:04x}",
        "end": f"{config.scan_end:04x}",
        "digits": digits,
    }
    if digits is None:
        payload["transitions"] = {
            str(width): [entry.to_dict() for entry in table.for_digits(width)]
            for width in WIDTHS
        }
    else:
        payload["transitions"] = [entry.to_dict() for entry in table.for_digits(digits)]
    return payload


@app.get("/calendar")
def calendar(tz: str | None = None):
    config = load_config()
    try:
        zone = _timezone(tz, config)
    except UnknownTimezone:
        return _unknown_timezone()
    try:
        years = build_calendar(config.calendar_start_year, config.calendar_end_year, zone)
    except PrefixAtlasError as exc:
        return _error(exc)
    return {
        "start_year": config.calendar_start_year,
        "end_year": config.calendar_end_year,
        "prefix_length": min_unique_prefix_length(calendar_prefixes(years)),
        "years": [year.to_dict() for year in years],
    }


@app.post("/generate")
def generate(
    count: str | None = Form(None),
    timestamp: str | None = Form(None),
    style: str = Form("canonical"),
):
    if style not in {"canonical", "braced"}:
        return JSONResponse({"error": "Unknown output style."}, status_code=400)
    try:
        result, error = generate_uuid7(count, timestamp, braced=style == "braced")
    except PrefixAtlasError as exc:
        return _error(exc)
    if error:
        return JSONResponse({"error": error}, status_code=400)
    return result
