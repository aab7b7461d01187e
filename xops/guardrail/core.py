"""The guardrail pipeline: classify, decide, ask, execute, audit."""

from __future__ import annotations

import dataclasses
from collections.abc import Callable
from typing import Any, TypeVar

from xops.config import GuardrailConfig
from xops.guardrail.approval import FALLBACK_DOWNGRADE, ApprovalError, request_approval
from xops.guardrail.audit import AuditEntry, AuditLogger
from xops.guardrail.policy import Decision, Policy, default_guardrail_config
from xops.guardrail.risk import RiskInput, classify

In = TypeVar("In")
Out = TypeVar("Out")

Handler = Callable[[Any, In], Out]


class GuardrailError(PermissionError):
    """Raised when the security policy refuses an operation outright."""


class Guardrail:
    """Risk classification, policy, approval and audit logging for tool calls.

    Without a configuration the defaults of :func:`default_guardrail_config`
    are used.
    """

    def __init__(self, config: GuardrailConfig | None = None) -> None:
        if config is None:
            config = default_guardrail_config()
        self.policy = Policy(config)
        self.audit = AuditLogger(config.audit_log)
        self.no_elicit_fallback = config.no_elicit_fallback or FALLBACK_DOWNGRADE


def with_guardrail(
    guardrail: Guardrail | None,
    tool_name: str,
    risk_input_fn: Callable[[In], RiskInput],
    handler: Handler[In, Out],
) -> Handler[In, Out]:
    """Wrap ``handler(request, tool_input)`` with the guardrail pipeline.

    The approval session is taken from ``request.session`` when present.
    Without a guardrail the handler is returned unchanged.
    """
    if guardrail is None:
        return handler

    def guarded(request: Any, tool_input: In) -> Out:
        risk_input = dataclasses.replace(risk_input_fn(tool_input), tool_name=tool_name)
        risk = classify(risk_input)
        decision = guardrail.policy.evaluate(risk, risk_input)

        entry = AuditEntry(
            tool=tool_name,
            node_id=risk_input.node_id,
            command=risk_input.command,
            paths=list(risk_input.paths),
            risk_level=str(risk),
            decision=str(decision),
        )

        if decision is Decision.DENY:
            entry.outcome = "denied"
            guardrail.audit.log(entry)
            raise GuardrailError("guardrail: operation denied — blocked by security policy")

        if decision is Decision.NEED_APPROVAL:
            session = getattr(request, "session", None)
            try:
                request_approval(session, risk, risk_input, guardrail.no_elicit_fallback)
            except ApprovalError as exc:
                entry.outcome = "denied"
                entry.error = str(exc)
                guardrail.audit.log(entry)
                raise
            entry.decision = "approved"

        try:
            output = handler(request, tool_input)
        except Exception as exc:
            entry.outcome = "error"
            entry.error = str(exc)
            guardrail.audit.log(entry)
            raise

        entry.outcome = "executed"
        guardrail.audit.log(entry)
        return output

    return guarded