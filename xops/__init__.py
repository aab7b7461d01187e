"""Operations toolkit: inventory, credentials, firewalls, local execution and guardrails."""

__version__ = "0.1.0"