"""Tier 2: durable per-day score records, also the system of record on cold start."""

from __future__ import annotations

import asyncio
import json
import logging
import os
import tempfile
import threading
from abc import ABC, abstractmethod
from datetime import date
from pathlib import Path
from typing import Any

from readiness_engine.models.enums import ScoreType
from readiness_engine.models.score import ComputationRecord

logger = logging.getLogger(__name__)


class DurableStore(ABC):
    """Persists serialized ScoreResults and the per-type ComputationRecord."""

    @abstractmethod
    async def get(self, score_type: ScoreType, day: date) -> dict[str, Any] | None:
        ...

    @abstractmethod
    async def put(self, score_type: ScoreType, day: date, record: dict[str, Any]) -> None:
        ...

    @abstractmethod
    async def get_record(self, score_type: ScoreType) -> ComputationRecord | None:
        """Last calendar day a real score of this type was computed."""
        ...

    @abstractmethod
    async def put_record(self, record: ComputationRecord) -> None:
        ...


def _result_key(score_type: ScoreType, day: date) -> str:
    return f"{score_type.slug}:{day.isoformat()}"


class InMemoryDurableStore(DurableStore):
    """Process-local store; survives nothing, useful for tests and ephemeral runs."""

    def __init__(self) -> None:
        self._results: dict[str, dict[str, Any]] = {}
        self._records: dict[ScoreType, ComputationRecord] = {}

    async def get(self, score_type: ScoreType, day: date) -> dict[str, Any] | None:
        record = self._results.get(_result_key(score_type, day))
        return dict(record) if record is not None else None

    async def put(self, score_type: ScoreType, day: date, record: dict[str, Any]) -> None:
        self._results[_result_key(score_type, day)] = dict(record)

    async def get_record(self, score_type: ScoreType) -> ComputationRecord | None:
        return self._records.get(score_type)

    async def put_record(self, record: ComputationRecord) -> None:
        self._records[record.score_type] = record


class JsonFileDurableStore(DurableStore):
    """Single JSON file holding results and computation records.

    Reads and writes run on a worker thread. Writes go to a temporary file
    that is then renamed over the original, so a crash never leaves a
    half-written store behind.
    """

    FILE_NAME = "scores.json"

    def __init__(self, directory: Path | str) -> None:
        self.path = Path(directory).expanduser() / self.FILE_NAME
        self._lock = threading.Lock()

    async def get(self, score_type: ScoreType, day: date) -> dict[str, Any] | None:
        data = await asyncio.to_thread(self._load)
        return data["results"].get(_result_key(score_type, day))

    async def put(self, score_type: ScoreType, day: date, record: dict[str, Any]) -> None:
        await asyncio.to_thread(self._update, "results", _result_key(score_type, day), record)

    async def get_record(self, score_type: ScoreType) -> ComputationRecord | None:
        data = await asyncio.to_thread(self._load)
        raw = data["records"].get(score_type.slug)
        if raw is None:
            return None
        try:
            return ComputationRecord.from_dict(raw)
        except (KeyError, ValueError):
            logger.warning("Discarding malformed computation record for %s", score_type.slug)
            return None

    async def put_record(self, record: ComputationRecord) -> None:
        await asyncio.to_thread(self._update, "records", record.score_type.slug, record.to_dict())

    def _load(self) -> dict[str, dict[str, Any]]:
        with self._lock:
            return self._read_unlocked()

    def _read_unlocked(self) -> dict[str, dict[str, Any]]:
        empty: dict[str, dict[str, Any]] = {"results": {}, "records": {}}
        if not self.path.exists():
            return empty
        try:
            with open(self.path, "r") as f:
                data = json.load(f)
        except (json.JSONDecodeError, OSError):
            logger.warning("Unreadable score store at %s, starting empty", self.path)
            return empty
        if not isinstance(data, dict):
            return empty
        return {
            "results": dict(data.get("results") or {}),
            "records": dict(data.get("records") or {}),
        }

    def _update(self, section: str, key: str, value: dict[str, Any]) -> None:
        with self._lock:
            data = self._read_unlocked()
            data[section][key] = value
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp = tempfile.mkstemp(dir=self.path.parent, suffix=".tmp")
            try:
                with os.fdopen(fd, "w") as f:
                    json.dump(data, f)
                os.replace(tmp, self.path)
            except BaseException:
                os.unlink(tmp)
                raise
