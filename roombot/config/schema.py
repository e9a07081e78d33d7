"""Configuration schema using Pydantic."""

from pathlib import Path
from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, PydanticBaseSettingsSource, SettingsConfigDict


class XmppConfig(BaseModel):
    """XMPP account and room configuration."""
    jid: str = ""  # Account JID (bot@example.com)
    password: str = ""
    room_jid: str = ""  # Multi-user chat room (room@conference.example.com)
    username: str = "roombot"  # Nickname used inside the room


class PolicyConfig(BaseModel):
    """Flood and command throttling windows."""
    message_cooldown_ms: int = 5000  # Identical outgoing text is dropped inside this window
    command_cooldown_ms: int = 5000  # Per-user command window


class BrainConfig(BaseModel):
    """Persistent key-value store configuration."""
    directory: str = "~/.roombot/brain"
    retries: int = Field(default=2, ge=0)  # Extra attempts for a failing get/set
    retry_delay_seconds: float = Field(default=0.1, ge=0)


class Config(BaseSettings):
    """Root configuration for RoomBot."""
    xmpp: XmppConfig = Field(default_factory=XmppConfig)
    policy: PolicyConfig = Field(default_factory=PolicyConfig)
    brain: BrainConfig = Field(default_factory=BrainConfig)
    debug: bool = False  # Log outgoing messages instead of sending them

    @property
    def brain_path(self) -> Path:
        """Get expanded brain directory."""
        return Path(self.brain.directory).expanduser()

    @property
    def room_occupant_jid(self) -> str:
        """Full occupant address of the bot inside the room."""
        return f"{self.xmpp.room_jid}/{self.xmpp.username}"

    model_config = SettingsConfigDict(env_prefix="ROOMBOT_", env_nested_delimiter="__")

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        # Environment wins over values loaded from the config file
        return env_settings, init_settings, dotenv_settings, file_secret_settings
