"""Risk levels and classification of tool invocations."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import IntEnum


class RiskLevel(IntEnum):
    """How dangerous a tool invocation is."""

    SAFE = 0
    MODERATE = 1
    DANGEROUS = 2

    def __str__(self) -> str:
        return self.name.lower()

    def __format__(self, spec: str) -> str:
        return format(str(self), spec)


def parse_risk_level(s: str) -> RiskLevel:
    """Convert a level name to a :class:`RiskLevel`; unknown names are dangerous."""
    try:
        return RiskLevel[s.upper()] if s == s.lower() else RiskLevel.DANGEROUS
    except KeyError:
        return RiskLevel.DANGEROUS


@dataclass
class RiskInput:
    """What is known about one tool invocation for risk assessment."""

    tool_name: str = ""
    node_id: str = ""
    command: str = ""
    paths: list[str] = field(default_factory=list)
    sudo: bool = False


TOOL_BASE_RISK: dict[str, RiskLevel] = {
    "xops_list_nodes": RiskLevel.SAFE,
    "xops_read_file": RiskLevel.SAFE,
    "xops_fs_ls": RiskLevel.SAFE,
    "xops_download": RiskLevel.SAFE,
    "xops_write_file": RiskLevel.MODERATE,
    "xops_upload": RiskLevel.MODERATE,
    "xops_fs_mkdir": RiskLevel.MODERATE,
    "xops_fs_touch": RiskLevel.MODERATE,
    "xops_fs_mv": RiskLevel.MODERATE,
    "xops_fs_cp": RiskLevel.MODERATE,
    "xops_fs_rm": RiskLevel.DANGEROUS,
    "xops_ssh_run": RiskLevel.DANGEROUS,
}


def classify(risk_input: RiskInput) -> RiskLevel:
    """Return the effective risk of an invocation.

    Unknown tools are dangerous; shell commands are analysed; paths can
    only raise the level.
    """
    from xops.guardrail.analyzer import analyze_command, analyze_paths

    base = TOOL_BASE_RISK.get(risk_input.tool_name)
    if base is None:
        return RiskLevel.DANGEROUS

    if risk_input.tool_name == "xops_ssh_run":
        if risk_input.command:
            base = analyze_command(risk_input.command)
        if risk_input.sudo and base < RiskLevel.MODERATE:
            base = RiskLevel.MODERATE

    return max(base, analyze_paths(risk_input.paths))