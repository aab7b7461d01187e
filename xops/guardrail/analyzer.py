"""Static analysis of shell commands and paths for risk."""

from __future__ import annotations

import re
from collections.abc import Iterable

from xops.guardrail.risk import RiskLevel

_BLOCKED_PATTERNS = tuple(
    re.compile(p)
    for p in (
        r"rm\s+(-[^\s]*\s+)*/([\s;|&]|$)",
        r"mkfs(\.\w+)?\s+",
        r"dd\s+.*if=/dev/",
        r"dd\s+.*of=/dev/",
        r">\s*/dev/sd",
        r":\(\)\s*\{\s*:\|:\s*&\s*\}\s*;\s*:",
        r"chmod\s+(-[^\s]+\s+)*777\s+/($|\s)",
        r"echo\s+.*>\s*/proc/",
    )
)

_DANGEROUS_PATTERNS = tuple(
    re.compile(p)
    for p in (
        r"rm\s+(-[^\s]*\s+)*-?r",
        r"\b(shutdown|reboot|halt|poweroff|init\s+[06])\b",
        r"\bsystemctl\s+(stop|disable|mask)\b",
        r"\bkill\s+-9\b",
        r"\bkillall\b",
        r"\biptables\s+-F\b",
        r"\bnft\s+flush\b",
        r"\bufw\s+disable\b",
        r">\s*/etc/",
        r"\bchown\s+(-[^\s]+\s+)*root\b",
        r"\bcurl\b.*\|\s*(ba)?sh",
        r"\bwget\b.*\|\s*(ba)?sh",
    )
)

SAFE_COMMAND_PREFIXES = (
    "ls", "cat", "head", "tail", "less", "more",
    "whoami", "hostname", "uname", "id",
    "df", "free", "uptime", "ps", "top",
    "date", "cal", "echo", "pwd", "which", "type",
    "wc", "file", "stat", "find", "grep", "awk", "sed",
    "ip addr", "ip route", "ss", "netstat",
    "systemctl status", "journalctl",
)

SENSITIVE_PATHS = (
    "/etc", "/boot", "/usr", "/sbin",
    "/var/lib", "/root", "/proc", "/sys",
)

_CHAIN_OPERATORS = ("&&", "||", "|", ";", ">>", ">")


def is_blocked(cmd: str) -> bool:
    """Tell whether ``cmd`` matches a pattern that is always refused."""
    normalized = cmd.strip()
    return any(p.search(normalized) for p in _BLOCKED_PATTERNS)


def extract_first_word(cmd: str) -> str:
    """Return the command word, skipping leading ``VAR=value`` assignments."""
    while True:
        head, sep, rest = cmd.partition(" ")
        if "=" in head and sep:
            cmd = rest.strip()
            continue
        return head


def _contains_chaining(cmd: str) -> bool:
    return any(op in cmd for op in _CHAIN_OPERATORS)


def analyze_command(cmd: str) -> RiskLevel:
    """Return the risk level of a shell command."""
    if not cmd:
        return RiskLevel.SAFE
    normalized = cmd.strip()

    if is_blocked(normalized):
        return RiskLevel.DANGEROUS
    if any(p.search(normalized) for p in _DANGEROUS_PATTERNS):
        return RiskLevel.DANGEROUS
    if _contains_chaining(normalized):
        return RiskLevel.MODERATE

    first_word = extract_first_word(normalized)
    for prefix in SAFE_COMMAND_PREFIXES:
        parts = prefix.split()
        if len(parts) == 1 and first_word == parts[0]:
            return RiskLevel.SAFE
        if len(parts) > 1 and normalized.startswith(prefix):
            return RiskLevel.SAFE
    return RiskLevel.MODERATE


def analyze_paths(paths: Iterable[str] | None) -> RiskLevel:
    """Return the highest risk implied by the paths; the root is dangerous."""
    level = RiskLevel.SAFE
    for path in paths or ():
        cleaned = path.rstrip("/")
        if cleaned in ("", "/"):
            return RiskLevel.DANGEROUS
        if any(
            cleaned == sensitive or cleaned.startswith(sensitive + "/")
            for sensitive in SENSITIVE_PATHS
        ):
            level = max(level, RiskLevel.MODERATE)
    return level