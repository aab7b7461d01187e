"""Firewall management over firewalld, ufw, nftables and iptables."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum

from xops.executor import CommandError, Executor


class Action(str, Enum):
    ALLOW = "allow"
    DENY = "deny"
    REJECT = "reject"
    DROP = "drop"


class Protocol(str, Enum):
    TCP = "tcp"
    UDP = "udp"
    ANY = "any"


@dataclass
class Rule:
    """A backend-neutral firewall rule.

    ``port`` may be a single port or a range such as ``"8080:8090"``;
    an empty ``source`` means any source.
    """

    port: str = ""
    service: str = ""
    protocol: Protocol = Protocol.ANY
    action: Action = Action.ALLOW
    source: str = ""
    comment: str = ""

    def __post_init__(self) -> None:
        self.protocol = Protocol(self.protocol) if self.protocol else Protocol.ANY
        self.action = Action(self.action) if self.action else Action.ALLOW


class FirewallError(RuntimeError):
    """Raised when no suitable firewall backend is available or usable."""


class BackendError(Exception):
    """An error reported by a specific firewall backend."""

    def __init__(self, backend: str, err: BaseException | str) -> None:
        super().__init__(backend, err)
        self.backend = backend
        self.err = err

    def __str__(self) -> str:
        return f"[{self.backend}] firewall error: {self.err}"


class Firewall(ABC):
    """Common operations of a firewall backend; each returns command output."""

    name: str = ""

    def __init__(self, executor: Executor) -> None:
        self.executor = executor

    @abstractmethod
    def status(self) -> str: ...

    @abstractmethod
    def enable(self) -> str: ...

    @abstractmethod
    def disable(self) -> str: ...

    @abstractmethod
    def list_rules(self) -> str: ...

    @abstractmethod
    def add_rule(self, rule: Rule) -> str: ...

    @abstractmethod
    def remove_rule(self, rule: Rule) -> str: ...

    @abstractmethod
    def reload(self) -> str: ...


_DROP_ACTIONS = (Action.DENY, Action.DROP)


class FirewalldBackend(Firewall):
    name = "firewalld"

    def __init__(self, executor: Executor, zone: str = "") -> None:
        super().__init__(executor)
        self.zone = zone or "public"

    def status(self) -> str:
        return self.executor.run_with_sudo("firewall-cmd --state")

    def enable(self) -> str:
        return self.executor.run_with_sudo("systemctl enable --now firewalld")

    def disable(self) -> str:
        return self.executor.run_with_sudo("systemctl disable --now firewalld")

    def list_rules(self) -> str:
        return self.executor.run_with_sudo(f"firewall-cmd --zone={self.zone} --list-all")

    def add_rule(self, rule: Rule) -> str:
        args = self.build_rule_args(rule, False)
        return self.executor.run_with_sudo(
            f"firewall-cmd --permanent --zone={self.zone} {args}"
        )

    def remove_rule(self, rule: Rule) -> str:
        args = self.build_rule_args(rule, True)
        return self.executor.run_with_sudo(
            f"firewall-cmd --permanent --zone={self.zone} {args}"
        )

    def reload(self) -> str:
        return self.executor.run_with_sudo("firewall-cmd --reload")

    def build_rule_args(self, rule: Rule, remove: bool) -> str:
        """Return the firewall-cmd arguments that add or remove ``rule``."""
        op = "--remove" if remove else "--add"
        proto = "tcp" if rule.protocol is Protocol.ANY else rule.protocol.value

        if rule.source:
            family = "ipv6" if ":" in rule.source else "ipv4"
            if rule.action in _DROP_ACTIONS:
                target = "drop"
            elif rule.action is Action.REJECT:
                target = "reject"
            else:
                target = "accept"

            rich = f"rule family='{family}' source address='{rule.source}' "
            if rule.port:
                rich += f"port port='{rule.port}' protocol='{proto}' "
            elif rule.service:
                rich += f"service name='{rule.service}' "
            rich += target
            return f"{op}-rich-rule='{rich}'"

        if rule.port:
            return f"{op}-port={rule.port}/{proto}"
        if rule.service:
            return f"{op}-service={rule.service}"
        return ""


class IptablesBackend(Firewall):
    name = "iptables"

    def status(self) -> str:
        return self.executor.run_with_sudo("iptables -L -n")

    def enable(self) -> str:
        return "iptables is always enabled if installed"

    def disable(self) -> str:
        return self.executor.run_with_sudo("iptables -F")

    def list_rules(self) -> str:
        return self.executor.run_with_sudo("iptables -S")

    def add_rule(self, rule: Rule) -> str:
        return self.executor.run_with_sudo(self.build_rule_cmd(rule, "-A"))

    def remove_rule(self, rule: Rule) -> str:
        return self.executor.run_with_sudo(self.build_rule_cmd(rule, "-D"))

    def reload(self) -> str:
        return ""

    def build_rule_cmd(self, rule: Rule, op: str) -> str:
        """Return the iptables command applying ``op`` (e.g. ``-A``) to ``rule``."""
        if rule.action in _DROP_ACTIONS:
            target = "DROP"
        elif rule.action is Action.REJECT:
            target = "REJECT"
        else:
            target = "ACCEPT"

        cmd = f"iptables {op} INPUT"
        if rule.source:
            cmd += f" -s {rule.source}"
        if rule.protocol is not Protocol.ANY:
            cmd += f" -p {rule.protocol.value}"
            if rule.port:
                cmd += f" --dport {rule.port}"
        cmd += f" -j {target}"
        return cmd


class NftablesBackend(Firewall):
    name = "nftables"

    def status(self) -> str:
        return self.executor.run_with_sudo("nft list ruleset")

    def enable(self) -> str:
        return self.executor.run_with_sudo("systemctl enable --now nftables")

    def disable(self) -> str:
        return self.executor.run_with_sudo("systemctl disable --now nftables")

    def list_rules(self) -> str:
        return self.executor.run_with_sudo("nft list ruleset")

    def add_rule(self, rule: Rule) -> str:
        return self.executor.run_with_sudo(self.build_rule_cmd(rule))

    def remove_rule(self, rule: Rule) -> str:
        raise FirewallError(
            "removing a rule by its description is unsupported for nftables, use its handle"
        )

    def reload(self) -> str:
        return ""

    def build_rule_cmd(self, rule: Rule) -> str:
        """Return the nft command that appends ``rule`` to the input chain."""
        cmd = "nft add rule inet filter input "
        if rule.source:
            cmd += f"ip saddr {rule.source} "
        if rule.protocol is not Protocol.ANY:
            cmd += rule.protocol.value + " "
        if rule.port:
            cmd += f"dport {rule.port} "
        cmd += "drop" if rule.action in _DROP_ACTIONS else "accept"
        return cmd


class UfwBackend(Firewall):
    name = "ufw"

    def status(self) -> str:
        return self.executor.run_with_sudo("ufw status")

    def enable(self) -> str:
        return self.executor.run_with_sudo("ufw --force enable")

    def disable(self) -> str:
        return self.executor.run_with_sudo("ufw disable")

    def list_rules(self) -> str:
        return self.executor.run_with_sudo("ufw status numbered")

    def add_rule(self, rule: Rule) -> str:
        return self.executor.run_with_sudo(self.build_rule_cmd(rule, False))

    def remove_rule(self, rule: Rule) -> str:
        return self.executor.run_with_sudo(self.build_rule_cmd(rule, True))

    def reload(self) -> str:
        return self.executor.run_with_sudo("ufw reload")

    def build_rule_cmd(self, rule: Rule, remove: bool) -> str:
        """Return the ufw command that adds or deletes ``rule``."""
        verb = "allow" if rule.action is Action.ALLOW else "deny"
        prefix = "ufw delete " if remove else "ufw "
        cmd = f"{prefix}{verb} "
        if rule.source:
            cmd += f"from {rule.source} "
        if rule.port:
            cmd += f"to any port {rule.port}"
            if rule.protocol is not Protocol.ANY:
                cmd += f" proto {rule.protocol.value}"
        elif rule.service:
            cmd += rule.service
        return cmd


_DETECTION_ORDER: tuple[tuple[str, type[Firewall]], ...] = (
    ("firewall-cmd", FirewalldBackend),
    ("ufw", UfwBackend),
    ("nft", NftablesBackend),
    ("iptables", IptablesBackend),
)

_BY_NAME: dict[str, type[Firewall]] = {
    "firewalld": FirewalldBackend,
    "ufw": UfwBackend,
    "iptables": IptablesBackend,
    "nftables": NftablesBackend,
}


def detect_firewall(executor: Executor) -> Firewall:
    """Probe for firewalld, ufw, nftables and iptables, in that order."""
    for binary, backend in _DETECTION_ORDER:
        try:
            executor.run(f"command -v {binary}")
        except (CommandError, OSError):
            continue
        return backend(executor)
    raise FirewallError("no supported firewall detected")


def get_firewall_by_name(name: str, executor: Executor) -> Firewall:
    """Return the backend called ``name`` (case-insensitive)."""
    backend = _BY_NAME.get(name.lower())
    if backend is None:
        raise FirewallError(f"unsupported firewall type: {name}")
    return backend(executor)