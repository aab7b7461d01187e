"""Policy decisions on whether a tool invocation may run."""

from __future__ import annotations

import posixpath
import re
from collections.abc import Iterable, Iterator
from enum import IntEnum

from xops.config import GuardrailConfig
from xops.guardrail.analyzer import SENSITIVE_PATHS, is_blocked
from xops.guardrail.risk import RiskInput, RiskLevel, parse_risk_level


class Decision(IntEnum):
    """Outcome of evaluating an invocation against the policy."""

    ALLOW = 0
    NEED_APPROVAL = 1
    DENY = 2

    def __str__(self) -> str:
        return self.name.lower()

    def __format__(self, spec: str) -> str:
        return format(str(self), spec)


def default_guardrail_config() -> GuardrailConfig:
    """Return the settings used when none are configured."""
    return GuardrailConfig(
        enabled=True,
        audit_log="~/.xops/audit.log",
        approval_threshold="dangerous",
        no_elicit_fallback="downgrade",
        protected_paths=["/etc", "/boot", "/usr", "/sbin", "/root"],
    )


def _translate_class(chars: Iterator[str]) -> str:
    negate = False
    items: list[str] = []
    first = True
    for ch in chars:
        if first and ch == "^" and not negate:
            negate = True
            continue
        first = False
        if ch == "]":
            if not items:
                raise ValueError("empty character class")
            return "[" + ("^" if negate else "") + "".join(items) + "]"
        if ch == "\\":
            escaped = next(chars, None)
            if escaped is None:
                raise ValueError("trailing backslash")
            items.append(re.escape(escaped))
        elif ch == "-":
            if not items:
                raise ValueError("range without start")
            items.append("-")
        else:
            items.append(re.escape(ch))
    raise ValueError("unterminated character class")


def _translate_glob(pattern: str) -> str:
    parts: list[str] = []
    chars = iter(pattern)
    for ch in chars:
        if ch == "*":
            parts.append("[^/]*")
        elif ch == "?":
            parts.append("[^/]")
        elif ch == "\\":
            escaped = next(chars, None)
            if escaped is None:
                raise ValueError("trailing backslash")
            parts.append(re.escape(escaped))
        elif ch == "[":
            parts.append(_translate_class(chars))
        else:
            parts.append(re.escape(ch))
    return "".join(parts)


def _glob_match(pattern: str, name: str) -> bool:
    """Shell-style match where ``*`` and ``?`` never cross ``/``; bad patterns never match."""
    try:
        regex = _translate_glob(pattern)
    except ValueError:
        return False
    return re.fullmatch(regex, name, flags=re.DOTALL) is not None


def _clean(path: str) -> str:
    if not path:
        return "."
    cleaned = posixpath.normpath(path)
    if cleaned.startswith("//"):
        cleaned = "/" + cleaned.lstrip("/")
    return cleaned


def _is_under(path: str, prefix: str) -> bool:
    prefix = _clean(prefix)
    return len(path) > len(prefix) and path.startswith(prefix) and path[len(prefix)] == "/"


class Policy:
    """Evaluates invocations against a :class:`GuardrailConfig`."""

    def __init__(self, config: GuardrailConfig) -> None:
        self.config = config

    def evaluate(self, risk: RiskLevel, risk_input: RiskInput) -> Decision:
        """Decide whether the invocation is allowed, needs approval or is denied."""
        cfg = self.config
        if not cfg.enabled:
            return Decision.ALLOW

        if risk_input.tool_name == "xops_ssh_run" and is_blocked(risk_input.command):
            return Decision.DENY

        if any(_glob_match(p, risk_input.command) for p in cfg.blocked_patterns):
            return Decision.DENY

        if self._is_path_protected(risk_input.paths) and risk < RiskLevel.DANGEROUS:
            risk = RiskLevel.MODERATE

        if risk >= self._threshold_for_node(risk_input.node_id):
            return Decision.NEED_APPROVAL
        return Decision.ALLOW

    def _threshold_for_node(self, node_id: str) -> RiskLevel:
        for pattern, override in self.config.node_overrides.items():
            if _glob_match(pattern, node_id):
                return parse_risk_level(override.approval_threshold)
        return parse_risk_level(self.config.approval_threshold)

    def _is_path_protected(self, paths: Iterable[str] | None) -> bool:
        protected = (*SENSITIVE_PATHS, *self.config.protected_paths)
        for target in paths or ():
            cleaned = _clean(target)
            if any(cleaned == p or _is_under(cleaned, p) for p in protected):
                return True
        return False