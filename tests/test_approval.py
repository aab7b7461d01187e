import pytest

from xops.guardrail.approval import (
    ApprovalError,
    build_approval_message,
    request_approval,
)
from xops.guardrail.risk import RiskInput, RiskLevel


class _Session:
    def __init__(self, action):
        self.action = action
        self.messages = []

    def elicit(self, message):
        self.messages.append(message)
        return self.action


class _Unsupported:
    def elicit(self, message):
        raise RuntimeError("elicitation unsupported")


def _input():
    return RiskInput(
        tool_name="xops_ssh_run",
        node_id="n1",
        command="ls",
        paths=["/a", "/b"],
        sudo=True,
    )


def test_message_contents():
    msg = build_approval_message(RiskLevel.DANGEROUS, _input())
    assert msg.startswith("⚠️ [Risk: DANGEROUS] Operation requires your approval\n\n")
    assert "Tool:  xops_ssh_run\n" in msg
    assert "Node:  n1\n" in msg
    assert "Command: ls\n" in msg
    assert "Sudo: yes\n" in msg
    assert "Paths: /a, /b\n" in msg
    assert msg.endswith("\nDo you approve this operation?")


def test_message_omits_empty_fields():
    msg = build_approval_message(RiskLevel.MODERATE, RiskInput(tool_name="xops_fs_mv"))
    assert "[Risk: MODERATE]" in msg
    assert "Node:" not in msg
    assert "Command:" not in msg
    assert "Sudo:" not in msg
    assert "Paths:" not in msg


def test_accept_passes_and_sends_message():
    session = _Session("accept")
    assert request_approval(session, RiskLevel.DANGEROUS, _input(), "deny") is None
    assert session.messages == [build_approval_message(RiskLevel.DANGEROUS, _input())]


@pytest.mark.parametrize(
    "action, fragment",
    [
        ("decline", "explicitly declined"),
        ("cancel", "cancelled by user"),
        ("maybe", "unexpected approval response"),
    ],
)
def test_non_accept_actions_raise(action, fragment):
    with pytest.raises(ApprovalError, match=fragment):
        request_approval(_Session(action), RiskLevel.DANGEROUS, _input(), "allow")


def test_no_session_raises():
    with pytest.raises(ApprovalError, match="no session available"):
        request_approval(None, RiskLevel.SAFE, _input(), "allow")


@pytest.mark.parametrize("risk", [RiskLevel.MODERATE, RiskLevel.DANGEROUS])
def test_fallback_allow(risk):
    assert request_approval(_Unsupported(), risk, _input(), "allow") is None


def test_fallback_downgrade_allows_moderate():
    assert request_approval(_Unsupported(), RiskLevel.MODERATE, _input(), "downgrade") is None


def test_fallback_downgrade_denies_dangerous():
    with pytest.raises(ApprovalError, match="dangerous operation denied"):
        request_approval(_Unsupported(), RiskLevel.DANGEROUS, _input(), "downgrade")


@pytest.mark.parametrize("fallback", ["deny", "bogus", ""])
def test_fallback_deny_and_unknown(fallback):
    with pytest.raises(ApprovalError, match="approval request failed"):
        request_approval(_Unsupported(), RiskLevel.MODERATE, _input(), fallback)