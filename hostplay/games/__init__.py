"""
Games module - Game-specific engines.

Each game has its own subpackage with:
- Board model (state)
- Action records
- Pure rule functions
- The host-side engine
"""
