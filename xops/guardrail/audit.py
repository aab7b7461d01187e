"""Append-only JSON Lines audit log of tool invocations."""

from __future__ import annotations

import dataclasses
import json
import os
import threading
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any


@dataclass
class AuditEntry:
    """One line of the audit log. ``outcome`` is executed, denied or error."""

    tool: str = ""
    node_id: str = ""
    command: str = ""
    paths: list[str] = field(default_factory=list)
    risk_level: str = ""
    decision: str = ""
    outcome: str = ""
    error: str = ""
    timestamp: datetime | None = None

    def _to_record(self) -> dict[str, Any]:
        ts = self.timestamp or datetime.now(timezone.utc)
        record: dict[str, Any] = {
            "ts": ts.isoformat().replace("+00:00", "Z"),
            "tool": self.tool,
        }
        if self.node_id:
            record["node"] = self.node_id
        if self.command:
            record["command"] = self.command
        if self.paths:
            record["paths"] = list(self.paths)
        record["risk"] = self.risk_level
        record["decision"] = self.decision
        record["outcome"] = self.outcome
        if self.error:
            record["error"] = self.error
        return record


def _expand_home(path: str) -> str:
    if path.startswith("~/"):
        try:
            return os.path.join(str(Path.home()), path[2:])
        except (RuntimeError, KeyError):
            return path
    return path


class AuditLogger:
    """Writes audit entries to a file; an empty path disables logging.

    A leading ``~/`` in the path stands for the user's home directory.
    """

    def __init__(self, path: str) -> None:
        self.path = _expand_home(path)
        self._lock = threading.Lock()

    def log(self, entry: AuditEntry) -> None:
        """Append ``entry``, stamped with the current UTC time; write errors are ignored."""
        if not self.path:
            return
        stamped = dataclasses.replace(entry, timestamp=datetime.now(timezone.utc))
        line = json.dumps(stamped._to_record(), ensure_ascii=False, separators=(",", ":"))

        with self._lock:
            directory = os.path.dirname(self.path)
            if directory:
                try:
                    os.makedirs(directory, mode=0o700, exist_ok=True)
                except OSError:
                    pass
            try:
                fd = os.open(self.path, os.O_APPEND | os.O_CREAT | os.O_WRONLY, 0o600)
                with os.fdopen(fd, "a", encoding="utf-8") as fh:
                    fh.write(line + "\n")
            except OSError:
                return