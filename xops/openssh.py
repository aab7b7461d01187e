"""Reading ~/.ssh/config and mapping its hosts onto inventory models."""

from __future__ import annotations

import os
import re
from dataclasses import dataclass, field
from pathlib import Path

from xops.models import Host, Identity, Node, SudoMode

OPENSSH_NODE_PREFIX = "openssh:"

_LINE_RE = re.compile(r"^([^\s=]+)(?:\s*=\s*|\s+)(.*)$")
_TRAILING_COMMENT_RE = re.compile(r"\s+#.*$")


@dataclass
class _Block:
    patterns: list[str] | None
    values: dict[str, str] = field(default_factory=dict)

    def matches(self, alias: str) -> bool:
        if self.patterns is None:
            return False
        positive = False
        for pattern in self.patterns:
            if pattern.startswith("!"):
                if _glob_match(pattern[1:], alias):
                    return False
            elif _glob_match(pattern, alias):
                positive = True
        return positive


def _glob_match(pattern: str, text: str) -> bool:
    regex = "".join(
        ".*" if ch == "*" else "." if ch == "?" else re.escape(ch) for ch in pattern
    )
    return re.fullmatch(regex, text, flags=re.DOTALL) is not None


def _unquote(value: str) -> str:
    if len(value) >= 2 and value[0] == value[-1] == '"':
        return value[1:-1]
    return value


def _parse(text: str) -> list[_Block]:
    blocks = [_Block(patterns=["*"])]
    for raw_line in text.splitlines():
        line = raw_line.strip()
        if not line or line.startswith("#"):
            continue
        match = _LINE_RE.match(line)
        if match is None:
            continue
        keyword = match.group(1).lower()
        value = _TRAILING_COMMENT_RE.sub("", match.group(2)).strip()
        if keyword == "host":
            blocks.append(_Block(patterns=[_unquote(p) for p in value.split()]))
        elif keyword == "match":
            blocks.append(_Block(patterns=None))
        elif value:
            blocks[-1].values.setdefault(keyword, _unquote(value))
    return blocks


def _home_dir() -> str | None:
    try:
        return str(Path.home())
    except (RuntimeError, KeyError):
        return None


def _current_user() -> str:
    home = _home_dir()
    if home is None:
        return ""
    return os.path.basename(os.path.normpath(home))


def expand_home_dir(path: str) -> str:
    """Replace a leading ``~`` with the user's home directory."""
    if not path or path[0] != "~":
        return path
    home = _home_dir()
    if home is None:
        return path
    rest = path[1:].lstrip("/\\")
    return os.path.normpath(os.path.join(home, rest) if rest else home)


def _parse_port(text: str) -> int:
    match = re.match(r"[+-]?\d+", text.strip())
    if match is None:
        return 22
    port = int(match.group(0))
    return port if 0 <= port <= 0xFFFF else 22


class OpenSSHParser:
    """Looks up host settings in an OpenSSH client configuration file.

    ``path`` defaults to ``~/.ssh/config``; a missing file yields defaults only.
    """

    def __init__(self, path: str | os.PathLike[str] | None = None) -> None:
        self._blocks: list[_Block] | None = None
        if path is None:
            home = _home_dir()
            if home is None:
                return
            path = os.path.join(home, ".ssh", "config")
        try:
            with open(path, encoding="utf-8", errors="replace") as fh:
                self._blocks = _parse(fh.read())
        except OSError:
            self._blocks = None

    def find(self, alias: str) -> str | None:
        """Return the virtual node ID for ``alias``, or None if it cannot be one."""
        if not alias or "@" in alias or ":" in alias:
            return None
        return OPENSSH_NODE_PREFIX + alias

    def get(self, alias: str, key: str, default: str) -> str:
        """Return the first value of ``key`` applying to ``alias``, else ``default``."""
        if self._blocks is None:
            return default
        wanted = key.lower()
        for block in self._blocks:
            if block.matches(alias) and wanted in block.values:
                value = block.values[wanted]
                return value if value else default
        return default

    def get_virtual_node(self, alias: str) -> tuple[Node, Host, Identity]:
        """Build an in-memory node, host and identity for ``alias``."""
        host_name = self.get(alias, "HostName", alias)
        user = self.get(alias, "User", _current_user())
        port = _parse_port(self.get(alias, "Port", "22"))

        identity_file = self.get(alias, "IdentityFile", "")
        if identity_file:
            identity_file = expand_home_dir(identity_file)

        proxy_jump = self.get(alias, "ProxyJump", "")
        if proxy_jump:
            proxy_jump = OPENSSH_NODE_PREFIX + proxy_jump

        node = Node(
            host_ref=f"{host_name}:{port}",
            identity_ref=f"{user}@{host_name}",
            proxy_jump=proxy_jump,
            sudo_mode=SudoMode.AUTO,
            tags=["openssh"],
            alias=[alias],
        )
        host = Host(address=host_name, port=port)
        identity = Identity(user=user, auth_type="auto", key_path=identity_file)
        return node, host, identity