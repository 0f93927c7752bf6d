"""Bot configuration loaded from a JSON file."""

from dataclasses import dataclass, field
from pathlib import Path

from mashumaro.mixins.json import DataClassJSONMixin

DEFAULT_CONFIG_PATH = "config.json"


@dataclass
class BotConfig(DataClassJSONMixin):
    """
    Settings for the scrim bot.

    Every field has a default so a partial (or missing) config file works.
    """

    # Chat server
    host: str = "0.0.0.0"
    port: int = 8000
    ssl_cert: str | None = None
    ssl_key: str | None = None

    # Storage and messages
    data_dir: str = "."
    locale: str = "en"

    # Access and relocation
    admin_ids: list[str] = field(default_factory=list)
    team_a_channel: str | None = None
    team_b_channel: str | None = None

    # Match setup behaviour
    autoclear_hour: int | None = None  # Local hour (0-23) to clear the queue daily
    post_setup_msg: str | None = None  # Posted after the final team announcement
    vote_duration: float = 60.0  # Seconds the map vote stays open
    vote_notice_at: float = 50.0  # Seconds into the vote when the closing notice is sent
    require_riot_id: bool = True  # Players must set a Riot id before joining

    def __post_init__(self):
        if self.autoclear_hour is not None and not 0 <= self.autoclear_hour <= 23:
            raise ValueError(f"autoclear_hour must be between 0 and 23, got {self.autoclear_hour}")
        if self.vote_duration < 0 or self.vote_notice_at < 0:
            raise ValueError("vote timings must not be negative")
        if self.vote_notice_at > self.vote_duration:
            raise ValueError("vote_notice_at must not be later than vote_duration")
        if bool(self.ssl_cert) != bool(self.ssl_key):
            raise ValueError("ssl_cert and ssl_key must be provided together")

    @classmethod
    def load(cls, path: str | Path = DEFAULT_CONFIG_PATH) -> "BotConfig":
        """Load the config file, or defaults when it does not exist."""
        path = Path(path)
        if not path.exists():
            return cls()
        return cls.from_json(path.read_text(encoding="utf-8"))
