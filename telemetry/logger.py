from __future__ import annotations

import json
import time
from collections import Counter
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional


def _now_iso() -> str:
    return time.strftime("%Y-%m-%dT%H:%M:%S", time.localtime())


@dataclass
class TelemetryLogger:
    """
    Append-only JSON-lines event sink.

    Each row carries the event name, wall time, uptime and the current
    context (e.g. which battle and map it belongs to). Nothing is written
    until init() gives it a file.
    """
    path: Optional[Path] = None
    enabled: bool = True
    flush_each_write: bool = False
    context: Dict[str, Any] = field(default_factory=dict)
    counts: Counter = field(default_factory=Counter)
    _started_at: float = field(default_factory=time.time)

    def init(self, path: Path) -> None:
        self.path = path
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.touch(exist_ok=True)
        self.log("telemetry_init", file=str(self.path))

    def set_context(self, **fields: Any) -> None:
        """Replace the fields stamped on every following row."""
        self.context = dict(fields)

    def log(self, event: str, **fields: Any) -> None:
        if not self.enabled or self.path is None:
            return

        self.counts[event] += 1
        row: Dict[str, Any] = {
            "t": time.time(),
            "ts": _now_iso(),
            "uptime": round(time.time() - self._started_at, 3),
            "event": event,
            **self.context,
            **fields,
        }

        try:
            with self.path.open("a", encoding="utf-8") as f:
                f.write(json.dumps(row, ensure_ascii=False, default=str) + "\n")
                if self.flush_each_write:
                    f.flush()
        except OSError:
            # A full disk or missing folder must not stop the battle.
            return


# global singleton (easy import everywhere)
telemetry = TelemetryLogger()
