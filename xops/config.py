"""Top-level configuration structure and guardrail settings."""

from __future__ import annotations

from dataclasses import dataclass, field

from xops.models import Host, Identity, Node


@dataclass
class NodeGuardrailConfig:
    """Per-node (glob pattern) policy override."""

    approval_threshold: str = ""


@dataclass
class GuardrailConfig:
    """Settings of the tool-invocation safety guardrail.

    ``no_elicit_fallback`` chooses what happens when the client cannot ask
    the user for approval: ``"deny"``, ``"allow"`` or ``"downgrade"``.
    """

    enabled: bool = False
    audit_log: str = ""
    approval_threshold: str = ""
    blocked_patterns: list[str] = field(default_factory=list)
    protected_paths: list[str] = field(default_factory=list)
    node_overrides: dict[str, NodeGuardrailConfig] = field(default_factory=dict)
    no_elicit_fallback: str = ""


@dataclass
class Configuration:
    """Identities, hosts and nodes keyed by their IDs."""

    identities: dict[str, Identity] = field(default_factory=dict)
    hosts: dict[str, Host] = field(default_factory=dict)
    nodes: dict[str, Node] = field(default_factory=dict)
    guardrail: GuardrailConfig | None = None