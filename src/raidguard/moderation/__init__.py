"""
Moderation logic behind the RaidGuard commands and protections.

- **protection_rules.py**: Pure rule evaluation (bot/new-account kicks, audit rules).
- **audit_log.py**: Audit-log executor lookup with a bounded retry policy.
- **role_assignment.py**: Rate-paced bulk role assignment.
"""
