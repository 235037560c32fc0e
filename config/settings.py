"""Configuration settings and data models."""

import json
import os
from pathlib import Path
from typing import Literal

import yaml
from pydantic import BaseModel, ConfigDict, Field, field_validator


class ServerConfig(BaseModel):
    """Connection settings for the debate server."""

    base_url: str = Field(
        default="http://localhost:8080", description="Debate server base URL (can also be set via DEBATE_SERVER_URL env var)"
    )
    request_timeout: float = Field(
        default=30.0, description="Timeout in seconds for session-control and synthesis calls"
    )
    stream_timeout: float | None = Field(
        default=600.0, description="Read timeout in seconds for an open event stream (None waits forever)"
    )
    user_id: int = Field(default=1, description="User id sent with session initialization")

    @field_validator("base_url")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        return v.rstrip("/")

    def resolved_base_url(self) -> str:
        """Base URL with the environment override applied."""
        return (os.getenv("DEBATE_SERVER_URL") or self.base_url).rstrip("/")


class DebaterConfig(BaseModel):
    """Personality settings for one AI debater."""

    model_config = ConfigDict(populate_by_name=True)

    personality: str = Field(default="Analytical", description="Debate personality style")
    expertise_level: str = Field(
        default="Expert", alias="expertiseLevel", description="Expertise level of the debater"
    )


class SessionConfig(BaseModel):
    """Per-session debate settings."""

    variant: Literal["automated", "interactive"] = Field(
        default="automated", description="AI vs AI stream or user vs AI argument streams"
    )
    language: Literal["en", "zh"] = Field(default="en", description="Language requested from the server")
    max_rounds: int = Field(default=5, ge=1, description="Number of debate rounds")
    round_seconds: int = Field(default=180, ge=1, description="Length of the round countdown")
    auto_play_speed: Literal["SLOW", "NORMAL", "FAST"] = Field(
        default="NORMAL", description="Pacing of the automated debate"
    )
    user_side: Literal["AFFIRMATIVE", "NEGATIVE"] = Field(
        default="AFFIRMATIVE", description="Side argued by the user in the interactive variant"
    )
    affirmative: DebaterConfig = Field(default_factory=DebaterConfig)
    negative: DebaterConfig = Field(
        default_factory=lambda: DebaterConfig(personality="Passionate")
    )
    max_argument_length: int = Field(
        default=500, ge=1, description="Maximum characters in a submitted user argument"
    )
    follow_judging_after_skip: bool = Field(
        default=True, description="Reconnect after skip-to-end to receive the judging sequence"
    )


class SystemConfig(BaseModel):
    """System-wide configuration."""

    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(default="INFO")


class AppConfig(BaseModel):
    """Complete application configuration."""

    server: ServerConfig
    session: SessionConfig
    system: SystemConfig

    @classmethod
    def load_from_file(cls, config_path: Path) -> "AppConfig":
        """Load configuration from JSON file."""
        if not config_path.exists():
            raise FileNotFoundError(f"Config file not found: {config_path}")

        with open(config_path, "r", encoding="utf-8") as f:
            data = json.load(f)

        required_sections = ["server", "session", "system"]
        missing_sections = [
            section for section in required_sections if section not in data
        ]
        if missing_sections:
            raise ValueError(f"Missing required config sections: {missing_sections}")

        return cls(**data)

    def save_to_file(self, config_path: Path) -> None:
        """Save configuration to YAML file."""
        config_path.parent.mkdir(parents=True, exist_ok=True)

        with open(config_path, "w", encoding="utf-8") as f:
            yaml.dump(
                self.model_dump(exclude_unset=True),
                f,
                default_flow_style=False,
                indent=2,
            )


def get_default_config(config_path: Path | None = None) -> AppConfig:
    """Load configuration from debate_client_config.json, creating it if needed."""
    config_path = config_path or Path("debate_client_config.json")
    if not config_path.exists():
        template_config = get_template_config()
        with open(config_path, "w", encoding="utf-8") as f:
            json.dump(template_config.model_dump(), f, indent=2)
    return AppConfig.load_from_file(config_path)


def get_template_config() -> AppConfig:
    """Get template configuration for config file generation."""
    return AppConfig(
        server=ServerConfig(
            base_url="http://localhost:8080",
            request_timeout=30.0,
            stream_timeout=600.0,
            user_id=1,
        ),
        session=SessionConfig(
            variant="automated",
            language="en",
            max_rounds=5,
            round_seconds=180,
            auto_play_speed="NORMAL",
            affirmative=DebaterConfig(personality="Analytical", expertise_level="Expert"),
            negative=DebaterConfig(personality="Passionate", expertise_level="Expert"),
        ),
        system=SystemConfig(log_level="INFO"),
    )
