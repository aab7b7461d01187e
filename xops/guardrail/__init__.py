"""Risk classification, policy, approval and audit logging for tool invocations."""