"""Pydantic configuration models for webdistill."""

from enum import Enum
from pathlib import Path
from typing import Literal, Optional

from pydantic import BaseModel, Field

DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
)


class ProfileName(str, Enum):
    """Built-in configuration profiles."""

    HOSTED = "hosted"
    LOCAL = "local"
    CUSTOM = "custom"


class NetworkConfig(BaseModel):
    """Configuration for the outbound HTTP client."""

    user_agent: str = Field(DEFAULT_USER_AGENT, description="User-Agent sent with every request")
    accept_language: str = Field("en-US,en;q=0.9", description="Accept-Language header value")
    proxy: Optional[str] = Field(None, description="HTTP/HTTPS proxy URL")
    max_content_size: int = Field(
        20 * 1024 * 1024,
        ge=1024,
        description="Maximum response body size in bytes",
    )
    block_private_ips: bool = Field(
        True,
        description="Reject URLs that point at private, loopback or link-local addresses",
    )

    model_config = {"extra": "forbid"}


class TimeoutConfig(BaseModel):
    """Per-suspension-point timeouts, in seconds."""

    fetch: float = Field(15.0, gt=0, description="Primary page fetch")
    oembed: float = Field(5.0, gt=0, description="YouTube oEmbed lookup")
    watch_page: float = Field(8.0, gt=0, description="YouTube watch page scrape")
    transcript: float = Field(5.0, gt=0, description="Transcript fetch inside a single-phase request")
    transcript_continuation: float = Field(
        25.0,
        gt=0,
        description="Transcript fetch in the two-phase continuation call",
    )

    model_config = {"extra": "forbid"}


class ExtractionConfig(BaseModel):
    """Tuning knobs for the readability and structured extraction passes."""

    char_threshold: int = Field(
        500,
        ge=0,
        description="Article length below which the scorer retries with relaxed flags",
    )
    min_content_length: int = Field(
        100,
        ge=1,
        description="Minimum article text length; shorter results fail extraction",
    )
    n_top_candidates: int = Field(5, ge=1, description="Candidates tracked while scoring")
    max_links: int = Field(100, ge=0, description="Cap on collected outbound links")
    max_references: int = Field(50, ge=0, description="Cap on collected Wikipedia references")

    model_config = {"extra": "forbid"}


class VideoConfig(BaseModel):
    """Configuration for YouTube sources."""

    two_phase: bool = Field(
        False,
        description="Return metadata immediately and resolve the transcript in a later call",
    )
    transcript_languages: list[str] = Field(
        default_factory=lambda: ["en"],
        description="Preferred caption languages, in order",
    )

    model_config = {"extra": "forbid"}


class StorageConfig(BaseModel):
    """Configuration for the document store collaborator."""

    backend: Literal["none", "memory", "sqlite"] = Field("memory", description="Store implementation")
    path: Path = Field(Path("webdistill.db"), description="Database file for the sqlite backend")

    model_config = {"extra": "forbid"}


class PerformanceConfig(BaseModel):
    """Configuration for performance tuning."""

    cpu_workers: int = Field(
        4,
        ge=1,
        description="Thread pool workers for CPU-bound parsing and extraction",
    )

    model_config = {"extra": "forbid"}


class DistillConfig(BaseModel):
    """
    Root configuration model for webdistill.

    Example:
        config = DistillConfig(
            profile=ProfileName.LOCAL,
            timeouts=TimeoutConfig(fetch=20.0),
        )

    YAML format:
        profile: hosted
        timeouts:
          fetch: 20
        video:
          two_phase: true
    """

    profile: ProfileName = Field(
        ProfileName.CUSTOM,
        description="Built-in profile to apply (hosted, local, custom)",
    )

    network: NetworkConfig = Field(default_factory=NetworkConfig)
    timeouts: TimeoutConfig = Field(default_factory=TimeoutConfig)
    extraction: ExtractionConfig = Field(default_factory=ExtractionConfig)
    video: VideoConfig = Field(default_factory=VideoConfig)
    storage: StorageConfig = Field(default_factory=StorageConfig)
    performance: PerformanceConfig = Field(default_factory=PerformanceConfig)

    # Logging
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        "INFO",
        description="Logging level",
    )
    log_file: Optional[Path] = Field(None, description="Log file path")

    model_config = {"extra": "forbid"}

    def to_yaml(self) -> str:
        """Serialize config to YAML string."""
        import yaml

        return yaml.dump(self.model_dump(mode="json", exclude_none=True), default_flow_style=False)

    @classmethod
    def from_yaml(cls, yaml_str: str) -> "DistillConfig":
        """Load config from YAML string."""
        import yaml

        data = yaml.safe_load(yaml_str) or {}
        return cls.model_validate(data)

    @classmethod
    def from_yaml_file(cls, path: Path) -> "DistillConfig":
        """Load config from YAML file."""
        return cls.from_yaml(path.read_text())
