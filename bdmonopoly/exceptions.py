"""
Custom exception hierarchy for the Bangladeshi Monopoly engine.

Rule violations by a player are never raised: engine methods return False
and record the reason. These exceptions cover configuration, persistence
and strict action handling.
"""


class MonopolyError(Exception):
    """Base exception for all game-related errors."""


class ConfigurationError(MonopolyError):
    """Board or card data could not be loaded; the game cannot start."""


class PersistenceError(MonopolyError):
    """A saved game could not be written or read back."""


class InvalidActionError(MonopolyError):
    """Action is not legal in the current state."""


class ValidationError(MonopolyError):
    """Input validation failed (player count, names, ids)."""
