"""Participant identity shared by the queue, draft and transports."""

from dataclasses import dataclass, field

from mashumaro.mixins.json import DataClassJSONMixin


@dataclass(frozen=True)
class Participant(DataClassJSONMixin):
    """
    A chat user taking part in match setup.

    Two participants are equal when their ids are equal; the display name is
    informational only and may change between messages.
    """

    id: str  # Opaque chat platform id
    name: str = field(default="", compare=False)  # Display name

    @property
    def mention(self) -> str:
        """Text used to address this participant in announcements."""
        return f"@{self.name or self.id}"

    def __str__(self) -> str:
        return self.name or self.id
