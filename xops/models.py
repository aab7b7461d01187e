"""Inventory data types: identities, hosts and nodes."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum


class SudoMode(str, Enum):
    """How a node escalates privileges."""

    NONE = "none"
    SUDO = "sudo"
    SUDOER = "sudoer"
    SU = "su"
    ROOT = "root"
    AUTO = "auto"


@dataclass
class Identity:
    """Authentication data for a login."""

    user: str = ""
    key_path: str = ""
    passphrase: str = ""
    password: str = ""
    auth_type: str = ""


@dataclass
class Host:
    """Network address of a machine."""

    address: str = ""
    port: int = 0
    alias: list[str] = field(default_factory=list)


@dataclass
class Node:
    """The unit users operate on: a host reference plus an identity reference."""

    host_ref: str = ""
    identity_ref: str = ""
    alias: list[str] = field(default_factory=list)
    tags: list[str] = field(default_factory=list)
    proxy_jump: str = ""
    sudo_mode: SudoMode | None = None
    su_pwd: str = ""


@dataclass
class NodeFilter:
    """Selection criteria for batch operations."""

    names: list[str] = field(default_factory=list)
    tags: list[str] = field(default_factory=list)