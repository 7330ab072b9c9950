"""FastAPI application with all routes."""
from __future__ import annotations

import logging
import os
from pathlib import Path

logging.basicConfig(level=logging.INFO, format="%(name)s | %(message)s")

from fastapi import FastAPI, HTTPException, Request
from fastapi.responses import FileResponse, JSONResponse, RedirectResponse

from exam_search.config import Settings, coerce_setting, load_settings, save_settings
from exam_search.models import QUESTION_TYPE_NAMES
from exam_search.parsers.exam_parser import ExamFileError
from exam_search.ranker import InvalidSelection, search_questions
from exam_search.snapshot import RecordSnapshot, SnapshotStore

app = FastAPI(title="Exam Search")
log = logging.getLogger("exam_search.app")

# Global state (initialized in startup)
_store: SnapshotStore | None = None
_settings: Settings | None = None


def get_store() -> SnapshotStore:
    assert _store is not None
    return _store


def get_settings() -> Settings:
    assert _settings is not None
    return _settings


def _current_snapshot() -> RecordSnapshot:
    store = get_store()
    if get_settings().auto_reload and not os.environ.get("EXAM_SEARCH_NO_AUTO_RELOAD"):
        try:
            return store.refresh()
        except ExamFileError as e:
            log.warning("Reload failed, serving snapshot v%d: %s", store.current().version, e)
    return store.current()


@app.on_event("startup")
async def startup():
    global _store, _settings
    if _store is not None:
        return  # Already initialized (e.g. by tests)
    _settings = load_settings()
    _store = SnapshotStore(_settings.data_full_path, strict=_settings.strict_parse)
    try:
        _store.reload()
    except ExamFileError as e:
        log.error("Initial load failed: %s", e)


# ── Static files ──────────────────────────────────────────────────────────

static_dir = Path(__file__).parent / "static"


@app.get("/")
async def index():
    return FileResponse(static_dir / "index.html")


@app.get("/style.css")
async def style():
    return FileResponse(static_dir / "style.css", media_type="text/css")


@app.get("/app.js")
async def script():
    return FileResponse(static_dir / "app.js", media_type="application/javascript")


@app.exception_handler(404)
async def not_found(request: Request, exc):
    if request.url.path.startswith("/api/"):
        return JSONResponse({"detail": "Not Found"}, status_code=404)
    return RedirectResponse("/", status_code=302)


# ── API: Search ───────────────────────────────────────────────────────────

@app.get("/api/types")
async def api_types():
    return {
        "types": [{"value": k, "label": v} for k, v in QUESTION_TYPE_NAMES.items()],
        "default": get_settings().default_question_type,
    }


def _result_message(count: int) -> tuple[str, str]:
    if count == 0:
        return "🔍 没有找到相关题目，请尝试其他关键词", "warning"
    return f"✅ 搜索完成！找到 {count} 条相关题目", "success"


@app.post("/api/search")
async def api_search(request: Request):
    body = await request.json()
    if not isinstance(body, dict):
        raise HTTPException(400, "Request body must be a JSON object")

    keyword = str(body.get("keyword") or "").strip()
    question_type = body.get("question_type") or ""
    if not question_type:
        raise HTTPException(400, "⚠️ 请选择一种题型！")
    if not isinstance(question_type, str):
        raise HTTPException(400, "无效的题型选择")

    s = get_settings()
    snapshot = _current_snapshot()
    try:
        results = search_questions(
            snapshot.records.values(),
            question_type,
            keyword,
            threshold=s.relevance_threshold,
            limit=s.max_results,
        )
    except InvalidSelection:
        raise HTTPException(400, "无效的题型选择")

    message, message_type = _result_message(len(results))
    return {
        "results": [r.to_dict() for r in results],
        "count": len(results),
        "keyword": keyword,
        "question_type": question_type,
        "message": message,
        "message_type": message_type,
        "version": snapshot.version,
    }


# ── API: Stats / reload ───────────────────────────────────────────────────

@app.get("/api/stats")
async def api_stats():
    return _current_snapshot().stats()


@app.post("/api/reload")
async def api_reload():
    try:
        snapshot = get_store().reload()
    except ExamFileError as e:
        raise HTTPException(500, str(e))
    return snapshot.stats()


# ── API: Settings ─────────────────────────────────────────────────────────

@app.get("/api/settings")
async def api_get_settings():
    return get_settings().to_dict()


@app.put("/api/settings")
async def api_update_settings(request: Request):
    body = await request.json()
    if not isinstance(body, dict):
        raise HTTPException(400, "Request body must be a JSON object")
    s = get_settings()
    known = {f.name for f in Settings.__dataclass_fields__.values()}
    updates = {}
    for k, v in body.items():
        if k in known:
            try:
                updates[k] = coerce_setting(k, v)
            except ValueError as e:
                raise HTTPException(400, str(e))
    for k, v in updates.items():
        setattr(s, k, v)
    save_settings(s)

    store = get_store()
    store.strict = s.strict_parse
    if store.path != s.data_full_path:
        store.path = s.data_full_path
        try:
            store.reload()
        except ExamFileError as e:
            log.warning("Reload after settings change failed: %s", e)
    return s.to_dict()
