"""
Utility functions and helpers for RaidGuard.

- **logger.py**: Centralized logging configuration with colored console output
  and per-session log files. Uses prompt_toolkit for console output.

- **discord_utils.py**: Permission checks for invokers and for the bot itself,
  and safe ephemeral error replies.
"""
