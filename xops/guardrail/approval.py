"""Asking the user to approve risky tool invocations."""

from __future__ import annotations

from typing import Any, Protocol

from xops.guardrail.risk import RiskInput, RiskLevel

FALLBACK_DENY = "deny"
FALLBACK_ALLOW = "allow"
FALLBACK_DOWNGRADE = "downgrade"


class ApprovalError(PermissionError):
    """Raised when an operation was not approved."""


class ElicitationSession(Protocol):
    """A client session able to ask its user a question.

    ``elicit`` returns the user's action (``"accept"``, ``"decline"`` or
    ``"cancel"``), either as a string or as an object with an ``action``
    attribute. It raises when the client cannot ask.
    """

    def elicit(self, message: str) -> Any: ...


def build_approval_message(risk: RiskLevel, risk_input: RiskInput) -> str:
    """Return the text shown to the user when asking for approval."""
    lines = [
        f"⚠️ [Risk: {str(risk).upper()}] Operation requires your approval",
        "",
        f"Tool:  {risk_input.tool_name}",
    ]
    if risk_input.node_id:
        lines.append(f"Node:  {risk_input.node_id}")
    if risk_input.command:
        lines.append(f"Command: {risk_input.command}")
    if risk_input.sudo:
        lines.append("Sudo: yes")
    if risk_input.paths:
        lines.append(f"Paths: {', '.join(risk_input.paths)}")
    lines.append("")
    lines.append("Do you approve this operation?")
    return "\n".join(lines)


def _apply_fallback(exc: BaseException, risk: RiskLevel, fallback: str) -> None:
    if fallback == FALLBACK_ALLOW:
        return
    if fallback == FALLBACK_DOWNGRADE:
        if risk < RiskLevel.DANGEROUS:
            return
        raise ApprovalError(
            "guardrail: dangerous operation denied — client does not support "
            f"approval and fallback is {fallback!r}: {exc}"
        ) from exc
    raise ApprovalError(
        f"guardrail: approval request failed (operation denied): {exc}"
    ) from exc


def request_approval(
    session: ElicitationSession | None,
    risk: RiskLevel,
    risk_input: RiskInput,
    fallback: str,
) -> None:
    """Ask the user to approve an operation; raise :class:`ApprovalError` if not.

    When the session cannot ask, ``fallback`` decides: ``"allow"`` lets
    everything through, ``"downgrade"`` lets all but dangerous operations
    through, anything else denies.
    """
    if session is None:
        raise ApprovalError("guardrail: no session available, cannot request approval")

    message = build_approval_message(risk, risk_input)
    try:
        result = session.elicit(message)
    except Exception as exc:  # any failure to ask falls back to the policy
        _apply_fallback(exc, risk, fallback)
        return

    action = getattr(result, "action", result)
    if action == "accept":
        return
    if action == "decline":
        raise ApprovalError("guardrail: operation explicitly declined by user")
    if action == "cancel":
        raise ApprovalError("guardrail: operation cancelled by user")
    raise ApprovalError(f"guardrail: unexpected approval response {action!r}, denying")