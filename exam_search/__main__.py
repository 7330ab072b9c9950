"""CLI entry point for exam-search.

Usage:
  uv run python -m exam_search serve [--port PORT] [--host HOST] [--no-auto-reload]
  uv run python -m exam_search stop
  uv run python -m exam_search restart [--port PORT]
  uv run python -m exam_search status
  uv run python -m exam_search check [FILE]
  uv run python -m exam_search search TYPE [KEYWORD ...]
  uv run python -m exam_search query TYPE [KEYWORD ...] [--url URL]
  uv run python -m exam_search stats
"""
from __future__ import annotations

import os
import signal
import sys
from pathlib import Path

PID_FILE = Path(__file__).resolve().parent.parent / ".server.pid"


def main():
    args = sys.argv[1:]
    command = args[0] if args else "serve"

    if command == "serve":
        _serve(args[1:])
    elif command == "stop":
        _stop()
    elif command == "restart":
        _restart(args[1:])
    elif command == "status":
        _status()
    elif command == "check":
        _check(args[1:])
    elif command == "search":
        _search(args[1:])
    elif command == "query":
        _query(args[1:])
    elif command == "stats":
        _stats()
    else:
        print(f"Unknown command: {command}")
        print("Commands: serve, stop, restart, status, check, search, query, stats")
        sys.exit(1)


def _parse_flag(args: list[str], name: str, default: str) -> str:
    for i, a in enumerate(args):
        if a == name and i + 1 < len(args):
            return args[i + 1]
    return default


def _strip_flag(args: list[str], name: str) -> list[str]:
    """Drop a flag and its value, leaving positional arguments."""
    out = []
    skip = False
    for a in args:
        if skip:
            skip = False
            continue
        if a == name:
            skip = True
            continue
        out.append(a)
    return out


def _read_pid() -> int | None:
    """Read PID from file, return None if stale or missing."""
    if not PID_FILE.exists():
        return None
    try:
        pid = int(PID_FILE.read_text().strip())
        os.kill(pid, 0)
        return pid
    except (ValueError, ProcessLookupError, PermissionError):
        PID_FILE.unlink(missing_ok=True)
        return None


def _write_pid() -> None:
    PID_FILE.write_text(str(os.getpid()))


def _remove_pid() -> None:
    PID_FILE.unlink(missing_ok=True)


def _stop() -> bool:
    """Stop a running server. Returns True if a server was stopped."""
    pid = _read_pid()
    if pid is None:
        print("Server is not running.")
        return False
    try:
        os.kill(pid, signal.SIGTERM)
        print(f"Stopped server (PID {pid}).")
        PID_FILE.unlink(missing_ok=True)
        return True
    except ProcessLookupError:
        print("Server was not running (stale PID file removed).")
        PID_FILE.unlink(missing_ok=True)
        return False


def _status():
    pid = _read_pid()
    if pid is None:
        print("Server is not running.")
    else:
        print(f"Server is running (PID {pid}).")


def _restart(args: list[str]):
    import time
    _stop()
    time.sleep(1)
    _serve(args)


def _serve(args: list[str]):
    import uvicorn

    from exam_search.config import load_settings

    existing = _read_pid()
    if existing is not None:
        print(f"Server already running (PID {existing}). Use 'restart' or 'stop' first.")
        sys.exit(1)

    if "--no-auto-reload" in args:
        os.environ["EXAM_SEARCH_NO_AUTO_RELOAD"] = "1"

    settings = load_settings()
    port = int(_parse_flag(args, "--port", os.environ.get("PORT") or str(settings.port)))
    host = _parse_flag(args, "--host", settings.host)
    _write_pid()

    print("🚀 题目搜索系统启动成功!")
    print(f"📖 请打开浏览器访问: http://{host}:{port}")
    print("⏹️  按 Ctrl+C 停止服务器\n")
    try:
        uvicorn.run(
            "exam_search.app:app",
            host=host,
            port=port,
            reload=False,
            timeout_graceful_shutdown=5,
        )
    finally:
        _remove_pid()
        os.environ.pop("EXAM_SEARCH_NO_AUTO_RELOAD", None)


def _load(path: Path | None = None):
    from exam_search.config import load_settings
    from exam_search.parsers.exam_parser import ExamFileError, load_exam_file

    settings = load_settings()
    try:
        return load_exam_file(path or settings.data_full_path, strict=settings.strict_parse)
    except ExamFileError as e:
        print(f"❌ {e}")
        sys.exit(1)


def _check(args: list[str]):
    from exam_search.category_index import CategoryIndex
    from exam_search.models import question_type_name

    path = Path(args[0]) if args else None
    loaded = _load(path)

    print(f"Lines read:        {loaded.lines}")
    print(f"Unique questions:  {len(loaded.records)}")
    for label, n in CategoryIndex(loaded.records.values()).counts().items():
        print(f"  {question_type_name(label)}: {n}")
    if loaded.errors:
        print(f"\n{len(loaded.errors)} bad line(s):")
        for err in loaded.errors:
            print(f"  {err}")
        sys.exit(1)


def _print_results(results: list[dict]):
    for i, r in enumerate(results, 1):
        print(f"[{i}] ({r['relevance']:.2f}) {r['title']}")
        print(f"    {r['info']}")
        for c in r["choices"]:
            print(f"      {c}")


def _search(args: list[str]):
    from exam_search.config import load_settings
    from exam_search.ranker import InvalidSelection, search_questions

    if not args:
        print("Usage: search TYPE [KEYWORD ...]")
        sys.exit(1)
    question_type, keyword = args[0], " ".join(args[1:]).strip()

    settings = load_settings()
    loaded = _load()
    try:
        results = search_questions(
            loaded.records.values(),
            question_type,
            keyword,
            threshold=settings.relevance_threshold,
            limit=settings.max_results,
        )
    except InvalidSelection as e:
        print(f"❌ {e}")
        sys.exit(1)

    _print_results([r.to_dict() for r in results])
    print(f"\n{len(results)} result(s)")


def _query(args: list[str]):
    import httpx

    from exam_search.config import load_settings

    settings = load_settings()
    url = _parse_flag(args, "--url", f"http://{settings.host}:{settings.port}")
    rest = _strip_flag(args, "--url")
    if not rest:
        print("Usage: query TYPE [KEYWORD ...] [--url URL]")
        sys.exit(1)

    try:
        resp = httpx.post(
            f"{url.rstrip('/')}/api/search",
            json={"question_type": rest[0], "keyword": " ".join(rest[1:])},
            timeout=10.0,
        )
    except httpx.HTTPError as e:
        print(f"❌ Could not reach {url}: {e}")
        sys.exit(1)

    data = resp.json()
    if resp.status_code != 200:
        print(f"❌ {data.get('detail', resp.status_code)}")
        sys.exit(1)
    _print_results(data["results"])
    print(f"\n{data['message']}")


def _stats():
    from exam_search.category_index import CategoryIndex
    from exam_search.models import question_type_name

    loaded = _load()
    index = CategoryIndex(loaded.records.values())

    print("Exam Search Stats")
    print("=" * 40)
    print(f"Exam results:       {len(loaded.exams)}")
    print(f"Unique questions:   {len(index)}")
    for label, n in index.counts().items():
        print(f"  {question_type_name(label):<16s}  {n}")
    print(f"Skipped lines:      {len(loaded.errors)}")


if __name__ == "__main__":
    main()
