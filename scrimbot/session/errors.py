"""
Error hierarchy for match setup.

Every error carries a Fluent message id and the arguments needed to render
it, so the command layer can report it to the invoker in the bot's locale.
"""

from typing import Any


class ScrimError(Exception):
    """Base class for all recoverable match setup errors."""

    message_id: str = "error-generic"

    def __init__(self, **kwargs: Any):
        self.kwargs = kwargs
        super().__init__(f"{self.message_id} {kwargs}" if kwargs else self.message_id)


# ==========================================================================
# Validation errors: reported to the invoker, nothing is mutated
# ==========================================================================


class ValidationError(ScrimError):
    """The command is not valid for the current state or input."""

    message_id = "error-invalid"


class WrongPhase(ValidationError):
    """Raised when an operation is invoked outside its legal phase."""

    message_id = "error-wrong-phase"

    def __init__(self, command: str, phase: str):
        super().__init__(command=command, phase=phase)
        self.command = command
        self.phase = phase


class AlreadyQueued(ValidationError):
    message_id = "error-already-queued"


class QueueFull(ValidationError):
    message_id = "error-queue-full"


class NotQueued(ValidationError):
    message_id = "error-not-queued"


class QueueNotFull(ValidationError):
    message_id = "error-queue-not-full"


class RiotIdRequired(ValidationError):
    message_id = "error-riot-id-required"


class AlreadyCaptain(ValidationError):
    message_id = "error-already-captain"


class CaptainsTaken(ValidationError):
    message_id = "error-captains-taken"


class NotCaptain(ValidationError):
    message_id = "error-not-captain"


class WrongTurn(ValidationError):
    message_id = "error-wrong-turn"


class AlreadyOnTeam(ValidationError):
    message_id = "error-already-on-team"


class NotCaptainB(ValidationError):
    message_id = "error-not-captain-b"


class NotAdmin(ValidationError):
    message_id = "error-not-admin"


class MissingMention(ValidationError):
    message_id = "error-missing-mention"


class MissingArgument(ValidationError):
    message_id = "error-missing-argument"


class InvalidRiotId(ValidationError):
    message_id = "error-invalid-riot-id"


class InvalidTeamName(ValidationError):
    message_id = "error-invalid-team-name"


# ==========================================================================
# Configuration errors: block only the specific action
# ==========================================================================


class ConfigurationError(ScrimError):
    """The configured map pool does not allow the action."""

    message_id = "error-configuration"


class NoMapsConfigured(ConfigurationError):
    message_id = "error-no-maps"


class PoolFull(ConfigurationError):
    message_id = "error-pool-full"


class DuplicateMap(ConfigurationError):
    message_id = "error-duplicate-map"


class MapNotFound(ConfigurationError):
    message_id = "error-map-not-found"


# ==========================================================================
# Delivery and storage errors: logged or reported, never rolled back
# ==========================================================================


class TransportError(ScrimError):
    """An outbound chat message, vote or relocation could not be delivered."""

    message_id = "error-transport"


class PersistenceError(ScrimError):
    """A persisted table could not be written."""

    message_id = "error-persistence"
