"""
User interface components for RaidGuard.

- **antiraid_panel.py**: Button-based anti-raid panel plus the Anti-Fake
  minimum-age dialog. Restricted to the invoking owner, re-rendered in place
  after every change, and closed after its timeout.
"""
