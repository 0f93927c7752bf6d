"""Admin checks for privileged commands."""

from ..session.participant import Participant


class AccessControl:
    """
    Decides which participants may run admin commands.

    Admins are listed by participant id in the configuration.
    """

    def __init__(self, admin_ids: list[str] | set[str] | None = None):
        self._admin_ids: set[str] = set(admin_ids or ())

    def is_admin(self, participant: Participant) -> bool:
        return participant.id in self._admin_ids
