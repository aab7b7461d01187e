from xops.config import GuardrailConfig, NodeGuardrailConfig
from xops.guardrail.policy import Decision, Policy, default_guardrail_config
from xops.guardrail.risk import RiskInput, RiskLevel


def default_test_config():
    return GuardrailConfig(
        enabled=True,
        approval_threshold="dangerous",
        protected_paths=["/etc", "/boot"],
    )


def test_disabled_allows_everything():
    cfg = default_test_config()
    cfg.enabled = False
    policy = Policy(cfg)
    got = policy.evaluate(RiskLevel.DANGEROUS, RiskInput(tool_name="xops_fs_rm", paths=["/"]))
    assert got == Decision.ALLOW


def test_blocked_command_is_denied():
    policy = Policy(default_test_config())
    got = policy.evaluate(
        RiskLevel.DANGEROUS,
        RiskInput(tool_name="xops_ssh_run", command="rm -rf /", node_id="test-node"),
    )
    assert got == Decision.DENY


def test_safe_operation_allowed():
    policy = Policy(default_test_config())
    got = policy.evaluate(RiskLevel.SAFE, RiskInput(tool_name="xops_list_nodes"))
    assert got == Decision.ALLOW


def test_dangerous_needs_approval():
    policy = Policy(default_test_config())
    got = policy.evaluate(
        RiskLevel.DANGEROUS,
        RiskInput(tool_name="xops_fs_rm", node_id="prod-web-1", paths=["/var/log/app"]),
    )
    assert got == Decision.NEED_APPROVAL


def test_moderate_with_moderate_threshold():
    cfg = default_test_config()
    cfg.approval_threshold = "moderate"
    policy = Policy(cfg)
    got = policy.evaluate(
        RiskLevel.MODERATE,
        RiskInput(tool_name="xops_write_file", node_id="test-node", paths=["/tmp/test.txt"]),
    )
    assert got == Decision.NEED_APPROVAL


def test_node_override():
    cfg = default_test_config()
    cfg.node_overrides = {"prod-*": NodeGuardrailConfig(approval_threshold="moderate")}
    policy = Policy(cfg)

    got = policy.evaluate(
        RiskLevel.MODERATE,
        RiskInput(tool_name="xops_write_file", node_id="prod-web-1", paths=["/tmp/test.txt"]),
    )
    assert got == Decision.NEED_APPROVAL

    got = policy.evaluate(
        RiskLevel.MODERATE,
        RiskInput(tool_name="xops_write_file", node_id="dev-api-1", paths=["/tmp/test.txt"]),
    )
    assert got == Decision.ALLOW


def test_protected_path():
    policy = Policy(default_test_config())
    risk_input = RiskInput(tool_name="xops_read_file", node_id="test-node", paths=["/etc/passwd"])
    assert policy.evaluate(RiskLevel.SAFE, risk_input) == Decision.ALLOW

    cfg = default_test_config()
    cfg.approval_threshold = "moderate"
    assert Policy(cfg).evaluate(RiskLevel.SAFE, risk_input) == Decision.NEED_APPROVAL


def test_custom_protected_path_and_lookalike():
    cfg = GuardrailConfig(enabled=True, approval_threshold="moderate", protected_paths=["/opt/app/"])
    policy = Policy(cfg)
    protected = RiskInput(tool_name="xops_read_file", paths=["/opt/app/data/../conf"])
    lookalike = RiskInput(tool_name="xops_read_file", paths=["/opt/application"])
    assert policy.evaluate(RiskLevel.SAFE, protected) == Decision.NEED_APPROVAL
    assert policy.evaluate(RiskLevel.SAFE, lookalike) == Decision.ALLOW


def test_custom_blocked_pattern():
    cfg = default_test_config()
    cfg.blocked_patterns = ["*dangerous*"]
    policy = Policy(cfg)
    got = policy.evaluate(
        RiskLevel.MODERATE,
        RiskInput(tool_name="xops_ssh_run", command="run_dangerous_script.sh", node_id="test"),
    )
    assert got == Decision.DENY


def test_blocked_pattern_star_does_not_cross_slash():
    cfg = default_test_config()
    cfg.blocked_patterns = ["rm *"]
    policy = Policy(cfg)
    risk_input = RiskInput(tool_name="xops_ssh_run", command="rm /tmp/x", node_id="n")
    assert policy.evaluate(RiskLevel.MODERATE, risk_input) == Decision.ALLOW
    plain = RiskInput(tool_name="xops_ssh_run", command="rm notes.txt", node_id="n")
    assert policy.evaluate(RiskLevel.MODERATE, plain) == Decision.DENY


def test_malformed_blocked_pattern_never_matches():
    cfg = default_test_config()
    cfg.blocked_patterns = ["[abc"]
    policy = Policy(cfg)
    risk_input = RiskInput(tool_name="xops_ssh_run", command="[abc", node_id="n")
    assert policy.evaluate(RiskLevel.MODERATE, risk_input) == Decision.ALLOW


def test_unknown_threshold_means_dangerous():
    cfg = default_test_config()
    cfg.approval_threshold = "whatever"
    policy = Policy(cfg)
    assert policy.evaluate(RiskLevel.MODERATE, RiskInput(tool_name="xops_fs_mkdir")) == Decision.ALLOW
    assert policy.evaluate(RiskLevel.DANGEROUS, RiskInput(tool_name="xops_fs_rm")) == Decision.NEED_APPROVAL


def test_decision_names():
    policy = Policy(default_test_config())
    allowed = policy.evaluate(RiskLevel.SAFE, RiskInput(tool_name="xops_list_nodes"))
    approval = policy.evaluate(RiskLevel.DANGEROUS, RiskInput(tool_name="xops_fs_rm", paths=["/tmp/x"]))
    denied = policy.evaluate(
        RiskLevel.DANGEROUS,
        RiskInput(tool_name="xops_ssh_run", command="rm -rf /", node_id="n"),
    )
    assert [str(d) for d in (allowed, approval, denied)] == ["allow", "need_approval", "deny"]
    assert f"{approval}" == "need_approval"


def test_default_guardrail_config():
    cfg = default_guardrail_config()
    assert cfg.enabled is True
    assert cfg.audit_log == "~/.xops/audit.log"
    assert cfg.approval_threshold == "dangerous"
    assert cfg.no_elicit_fallback == "downgrade"
    assert cfg.protected_paths == ["/etc", "/boot", "/usr", "/sbin", "/root"]


def test_default_config_instances_are_independent():
    first = default_guardrail_config()
    first.protected_paths.append("/srv")
    assert "/srv" not in default_guardrail_config().protected_paths