"""
Exceptions for infrastructure failures.

Rule violations are never raised: an illegal action is an expected event
(stale or duplicate client) and is silently discarded by the engine.
These exceptions cover the layers around the engines instead.
"""


class HostplayError(Exception):
    """Base class for all hostplay errors."""
    pass


class MatchNotFound(HostplayError):
    """Match does not exist or has ended."""

    def __init__(self, match_id: str):
        self.match_id = match_id
        super().__init__(f"Match {match_id} not found")


class UnknownGameType(HostplayError):
    """Requested game type is not registered."""

    def __init__(self, game_type: str):
        self.game_type = game_type
        super().__init__(f"Unknown game type: {game_type}")


class InvalidActionPayload(HostplayError):
    """Wire payload could not be parsed into an action record."""
    pass


class AuthorityError(HostplayError):
    """Dispatcher was configured inconsistently with its authority."""
    pass
