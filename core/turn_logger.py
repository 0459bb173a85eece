"""JSONL turn log for the weather bot.

Each handled activity produces one ``TurnRecord`` line: what came in, what the
recognizer made of it, whether a weather lookup succeeded, and what the bot
sent back. Files are size-bounded with numbered backups.
"""

from __future__ import annotations

import json
from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, IO, List, Optional


def _utc_now() -> str:
    return datetime.now(tz=timezone.utc).isoformat()


@dataclass
class TurnRecord:
    """One handled activity, as written to the turn log."""

    timestamp: str
    activity_type: str
    user_text: str = ""
    intent: Optional[str] = None
    score: Optional[float] = None
    location: Optional[str] = None
    weather_success: Optional[bool] = None
    replies: List[str] = field(default_factory=list)
    resolution_status: str = "unknown"
    latency_ms: Optional[int] = None

    @classmethod
    def new(
        cls,
        *,
        activity_type: str,
        user_text: str = "",
        intent: Optional[str] = None,
        score: Optional[float] = None,
        location: Optional[str] = None,
        weather_success: Optional[bool] = None,
        replies: Optional[List[str]] = None,
        resolution_status: str = "unknown",
        latency_ms: Optional[int] = None,
    ) -> "TurnRecord":
        return cls(
            timestamp=_utc_now(),
            activity_type=activity_type,
            user_text=user_text,
            intent=intent,
            score=score,
            location=location,
            weather_success=weather_success,
            replies=list(replies or []),
            resolution_status=resolution_status,
            latency_ms=latency_ms,
        )


class TurnLogger:
    """Append ``TurnRecord`` rows to a JSONL file with optional rotation."""

    def __init__(
        self,
        *,
        turn_log_path: Path,
        enabled: bool = True,
        max_bytes: int = 0,
        backup_count: int = 0,
    ) -> None:
        self._turn_log_path = turn_log_path
        self._enabled = enabled
        self._max_bytes = max_bytes
        self._backup_count = backup_count

    @property
    def enabled(self) -> bool:
        return self._enabled

    def log_turn(self, record: TurnRecord) -> None:
        if not self._enabled:
            return
        self._append_json_line(self._turn_log_path, asdict(record))

    def _append_json_line(self, path: Path, payload: Dict[str, Any]) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        line = json.dumps(payload, ensure_ascii=False)
        self._rotate_if_needed(path, len(line.encode("utf-8")) + 1)
        with self._open_file(path) as handle:
            handle.write(line)
            handle.write("\n")

    @staticmethod
    def _open_file(path: Path) -> IO[str]:
        return path.open("a", encoding="utf-8")

    def _rotate_if_needed(self, path: Path, incoming_bytes: int) -> None:
        """Shift ``turns.jsonl`` -> ``turns.jsonl.1`` -> ... once ``max_bytes`` is hit."""
        if self._max_bytes <= 0 or not path.exists():
            return
        if path.stat().st_size + incoming_bytes <= self._max_bytes:
            return

        if self._backup_count <= 0:
            path.unlink()
            return

        for index in range(self._backup_count - 1, 0, -1):
            src = Path(f"{path}.{index}")
            if src.exists():
                src.replace(Path(f"{path}.{index + 1}"))

        rotated = Path(f"{path}.1")
        if rotated.exists():
            rotated.unlink()
        path.replace(rotated)


__all__ = ["TurnLogger", "TurnRecord"]
