# xops

A library for day-to-day operations work on groups of machines.

## What it contains

- **`xops.models`** holds the inventory data types. These are `Identity`, `Host`, `Node`,
  `NodeFilter` and the `SudoMode` enum.
- **`xops.config`** holds `Configuration`, which keeps identities, hosts and nodes in
  dictionaries keyed by ID. It also holds `GuardrailConfig` and `NodeGuardrailConfig`.
- **`xops.provider`** holds `Provider`, an indexed view of a `Configuration`.
  - `find` looks a node up by:
    - its ID;
    - a node alias;
    - a host address;
    - a host alias;
    - the user and address joined by an at sign, with or without the port.
  - `find` returns the node ID, or `None` when nothing matches.
  - `delete_node` removes a node. It also drops any host or identity that no other node uses.
- **`xops.openssh`** holds `OpenSSHParser`, which reads an OpenSSH client config file.
  - The file is `~/.ssh/config` unless you give another path.
  - `get_virtual_node` builds an in-memory `Node`, `Host` and `Identity` for a host alias.
- **`xops.crypto`** handles encryption with AES-256-GCM.
  - `Crypter` encrypts to values of the form `ENC:<base64>`.
  - `is_encrypted` tells whether a value has that form.
  - `load_or_generate_key` reads a 32-byte key file. If the file is missing, it creates one
    with mode 0600.
- **`xops.executor`** holds `LocalExecutor`, which runs commands on this machine through
  `bash -c`.
  - It can run commands with sudo. When it is given a password, it passes that password to
    `sudo -S`.
  - A failed command raises `CommandError`. The error carries the command's output and exit
    code.
- **`xops.firewall`** holds the firewall backends `FirewalldBackend`, `UfwBackend`,
  `NftablesBackend` and `IptablesBackend`, built around the common `Rule` type.
  - `detect_firewall` probes for firewalld, ufw, nftables and iptables, in that order.
  - `get_firewall_by_name` picks a backend by name.
  - Both raise `FirewallError` when no backend fits.
- **`xops.logger`** provides console logging and printing.
  - Levelled output comes from `info`, `success`, `warn`, `error` and `debug`.
  - Unlevelled coloured printing comes from `print_info`, `print_success`, `print_warn` and
    `print_error`.
  - `set_color_mode` controls colour and honours `NO_COLOR`. `set_log_level` sets the level;
    logging is silent until you set one.
- **`xops.guardrail`** holds the safety checks for tool invocations:
  - `risk` defines `RiskLevel`, `RiskInput` and `classify`.
  - `analyzer` defines `is_blocked`, `analyze_command` and `analyze_paths`.
  - `policy` defines `Policy`, `Decision` and `default_guardrail_config`.
  - `approval` defines `request_approval`, which has deny, allow and downgrade fallbacks.
  - `audit` defines `AuditLogger`, which writes a JSON Lines audit file.
  - `core` defines `Guardrail` and `with_guardrail`. `with_guardrail` wraps a handler with the
    whole classify → decide → approve → execute → audit pipeline.
- **`xops.runner`** holds `run_parallel`, which runs a task on many nodes with bounded
  concurrency. It yields a `Result` for each node, in completion order.

## Installation

```
pip install .
```

## Examples

### Encrypting a value

```python
from xops.crypto import Crypter, is_encrypted, load_or_generate_key

key = load_or_generate_key("/tmp/xops/config.key")
crypter = Crypter(key)
sealed = crypter.encrypt("secret")
assert is_encrypted(sealed)
assert crypter.decrypt(sealed) == "secret"
```

### Looking up nodes

```python
from xops.config import Configuration
from xops.models import Host, Identity, Node
from xops.provider import Provider

provider = Provider(Configuration())
provider.add_host("h1", Host(address="10.0.0.1", port=22))
provider.add_identity("i1", Identity(user="admin", auth_type="key"))
provider.add_node("web", Node(host_ref="h1", identity_ref="i1", alias=["ws1"]))

assert provider.find("ws1") == "web"
assert provider.find("10.0.0.1") == "web"
assert provider.find("unknown") is None
```

### Building firewall rules

```python
from xops.executor import LocalExecutor
from xops.firewall import Protocol, Rule, UfwBackend

ufw = UfwBackend(LocalExecutor())
rule = Rule(port="443", protocol=Protocol.TCP)
assert ufw.build_rule_cmd(rule, False) == "ufw allow to any port 443 proto tcp"
```

Calling `ufw.add_rule(rule)` runs that command with sudo.

### Classifying command risk

```python
from xops.guardrail.analyzer import analyze_command, is_blocked
from xops.guardrail.risk import RiskLevel

assert is_blocked("rm -rf /")
assert analyze_command("ls -la") is RiskLevel.SAFE
assert analyze_command("systemctl stop nginx") is RiskLevel.DANGEROUS
```

## What it does not do

- **No command-line program.** The package is a library and installs no command.
- **No remote connections.** Commands run only on the local machine through `LocalExecutor`.
  There is no SSH client, SFTP transfer or tool server. The guardrail wraps handlers that you
  supply.
- **No configuration storage.** A `Configuration` lives in memory only. The package does not
  load or save a configuration file. You can use `Crypter` to protect secret values yourself.

## Running the tests

```
pip install ".[test]"
pytest
```