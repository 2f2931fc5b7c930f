"""
Hostplay - Host-Authoritative Board Game Engines

Deterministic rule engines for turn-based board games played by remote
participants. One participant's process is the host; it validates and
applies every action and publishes the resulting state to everyone else.

Games:
- Token race: four colors racing tokens around a shared 52-cell track
- Sowing: a 12-cell mancala with two mandarin cells

Each engine provides:
- State management with snapshot publication
- Silent rejection of illegal actions
- Win/draw detection
- A scripted bot opponent
"""

__version__ = "0.1.0"
