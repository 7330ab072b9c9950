"""Versioned, read-only views of the loaded question set.

A search takes store.current() once and works on that snapshot for its whole
lifetime. Reloading builds a new snapshot and swaps the reference, so a
search already in progress never sees a half-loaded record set.
"""
from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType

from exam_search.category_index import CategoryIndex
from exam_search.models import ExamInfo, QuestionRecord
from exam_search.parsers.exam_parser import ExamLoad, ParseError, load_exam_file

log = logging.getLogger("exam_search.snapshot")


@dataclass(frozen=True)
class RecordSnapshot:
    version: int
    records: Mapping[str, QuestionRecord] = field(default_factory=lambda: MappingProxyType({}))
    exams: tuple[ExamInfo, ...] = ()
    errors: tuple[ParseError, ...] = ()
    source_mtime_ns: int | None = None

    @classmethod
    def from_load(cls, version: int, load: ExamLoad, mtime_ns: int | None = None) -> RecordSnapshot:
        return cls(
            version=version,
            records=MappingProxyType(dict(load.records)),
            exams=tuple(load.exams),
            errors=tuple(load.errors),
            source_mtime_ns=mtime_ns,
        )

    def stats(self) -> dict:
        return {
            "version": self.version,
            "total_questions": len(self.records),
            "categories": CategoryIndex(self.records.values()).counts(),
            "exams": len(self.exams),
            "parse_errors": len(self.errors),
        }


class SnapshotStore:
    def __init__(self, path: Path, strict: bool = False):
        self.path = path
        self.strict = strict
        self._snapshot = RecordSnapshot(version=0)

    def current(self) -> RecordSnapshot:
        return self._snapshot

    def _mtime_ns(self) -> int | None:
        if not self.path.exists():
            return None
        return self.path.stat().st_mtime_ns

    def reload(self) -> RecordSnapshot:
        mtime = self._mtime_ns()
        load = load_exam_file(self.path, strict=self.strict)
        snapshot = RecordSnapshot.from_load(self._snapshot.version + 1, load, mtime)
        self._snapshot = snapshot
        log.info("Snapshot v%d: %d questions", snapshot.version, len(snapshot.records))
        return snapshot

    def refresh(self) -> RecordSnapshot:
        """Reload only if the data file changed since the current snapshot."""
        mtime = self._mtime_ns()
        if mtime is None or mtime == self._snapshot.source_mtime_ns:
            return self._snapshot
        log.info("Changed: %s, reloading", self.path.name)
        return self.reload()
