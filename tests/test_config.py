"""Tests for configuration, profiles, URL validation and logging."""

import logging
from pathlib import Path

import pytest
from pydantic import ValidationError as PydanticValidationError
from webdistill import setup_logging
from webdistill.errors import ValidationError
from webdistill.models.config import (
    DistillConfig,
    ProfileName,
    StorageConfig,
    TimeoutConfig,
    VideoConfig,
)
from webdistill.models.profiles import apply_profile
from webdistill.security.url_validator import UrlValidator


class TestDistillConfig:
    """Tests for DistillConfig."""

    def test_defaults(self):
        """Test default timeouts and collaborators."""
        config = DistillConfig()

        assert config.profile == ProfileName.CUSTOM
        assert config.timeouts.fetch == 15.0
        assert config.timeouts.oembed == 5.0
        assert config.timeouts.watch_page == 8.0
        assert config.timeouts.transcript == 5.0
        assert config.timeouts.transcript_continuation == 25.0
        assert config.video.two_phase is False
        assert config.video.transcript_languages == ["en"]
        assert config.storage.backend == "memory"
        assert config.network.block_private_ips is True
        assert config.extraction.max_links == 100
        assert config.extraction.max_references == 50

    def test_extra_fields_forbidden(self):
        """Test that typos in config keys are rejected."""
        with pytest.raises(PydanticValidationError):
            DistillConfig(timeout={"fetch": 1})
        with pytest.raises(PydanticValidationError):
            TimeoutConfig(fetch_timeout=1)

    def test_invalid_values(self):
        """Test field constraints."""
        with pytest.raises(PydanticValidationError):
            TimeoutConfig(fetch=0)
        with pytest.raises(PydanticValidationError):
            StorageConfig(backend="postgres")

    def test_yaml_round_trip(self, tmp_path):
        """Test YAML serialization."""
        pytest.importorskip("yaml")
        config = DistillConfig(
            profile=ProfileName.HOSTED,
            timeouts=TimeoutConfig(fetch=20.0),
            video=VideoConfig(transcript_languages=["de", "en"]),
            storage=StorageConfig(backend="sqlite", path=Path("data/docs.db")),
        )

        loaded = DistillConfig.from_yaml(config.to_yaml())
        assert loaded == config

        path = tmp_path / "config.yaml"
        path.write_text("timeouts:\n  transcript_continuation: 10\nvideo:\n  two_phase: true\n")
        from_file = DistillConfig.from_yaml_file(path)
        assert from_file.timeouts.transcript_continuation == 10.0
        assert from_file.video.two_phase is True

    def test_empty_yaml(self):
        """Test that an empty document gives the defaults."""
        pytest.importorskip("yaml")
        assert DistillConfig.from_yaml("") == DistillConfig()


class TestProfiles:
    """Tests for configuration profiles."""

    def test_hosted(self):
        """Test the request/response deployment profile."""
        config = apply_profile(DistillConfig(profile=ProfileName.HOSTED))

        assert config.video.two_phase is True
        assert config.storage.backend == "sqlite"
        assert config.network.block_private_ips is True

    def test_local(self):
        """Test the single-user profile."""
        config = apply_profile(DistillConfig(profile=ProfileName.LOCAL))

        assert config.video.two_phase is False
        assert config.timeouts.transcript == 30.0
        assert config.storage.backend == "none"
        assert config.network.block_private_ips is False

    def test_profile_keeps_unrelated_settings(self):
        """Test that profile overrides are merged, not replaced."""
        config = apply_profile(DistillConfig(profile=ProfileName.LOCAL, timeouts=TimeoutConfig(fetch=3.0)))

        assert config.timeouts.fetch == 3.0
        assert config.timeouts.transcript == 30.0

    def test_explicit_settings_win(self):
        """Test that values the caller set are never replaced by the profile."""
        config = apply_profile(
            DistillConfig(
                profile=ProfileName.LOCAL,
                timeouts=TimeoutConfig(transcript=10.0),
                storage=StorageConfig(backend="memory"),
                video=VideoConfig(two_phase=True),
            )
        )

        assert config.timeouts.transcript == 10.0
        assert config.storage.backend == "memory"
        assert config.video.two_phase is True
        assert config.network.block_private_ips is False

    def test_explicit_settings_from_yaml(self):
        """Test that keys present in a config file count as explicit."""
        pytest.importorskip("yaml")
        config = apply_profile(DistillConfig.from_yaml("profile: hosted\nvideo:\n  two_phase: false\n"))

        assert config.video.two_phase is False
        assert config.storage.backend == "sqlite"

    def test_custom_untouched(self):
        """Test that the custom profile applies nothing."""
        config = DistillConfig(video=VideoConfig(two_phase=True))
        assert apply_profile(config) is config


class TestUrlValidator:
    """Tests for UrlValidator."""

    @pytest.mark.parametrize(
        "url",
        ["https://example.com/post", "http://example.com", "  https://en.wikipedia.org/wiki/Ada  "],
    )
    def test_valid(self, url):
        """Test that public http(s) URLs pass."""
        assert UrlValidator().validate(url).is_valid

    @pytest.mark.parametrize(
        "url,reason",
        [
            ("", "required"),
            ("/relative/path", "absolute"),
            ("ftp://example.com/file", "absolute"),
            ("javascript:alert(1)", "absolute"),
            ("https://", "domain"),
            ("http://localhost:8080/", "Localhost"),
            ("http://db.internal/", "Internal"),
            ("http://127.0.0.1/", "Loopback"),
            ("http://169.254.169.254/latest/meta-data", "Link-local"),
            ("http://10.0.0.5/", "Private"),
            ("http://[::1]/", "Loopback"),
        ],
    )
    def test_invalid(self, url, reason):
        """Test rejection reasons."""
        result = UrlValidator().validate(url)

        assert not result.is_valid
        assert reason in result.rejection_reason

    def test_private_allowed_when_disabled(self):
        """Test that LAN addresses pass when blocking is off."""
        validator = UrlValidator(block_private_ips=False)

        assert validator.validate("http://192.168.1.10/wiki").is_valid
        assert not validator.validate("file:///etc/passwd").is_valid

    def test_ensure_valid(self):
        """Test the raising form."""
        validator = UrlValidator()

        assert validator.ensure_valid(" https://example.com ") == "https://example.com"
        with pytest.raises(ValidationError) as exc_info:
            validator.ensure_valid("not a url")
        assert exc_info.value.status_code == 400


class TestSetupLogging:
    """Tests for setup_logging."""

    def test_console_and_file_handlers(self, tmp_path):
        """Test that the package logger writes to stderr and the log file."""
        log_file = tmp_path / "webdistill.log"
        logger = setup_logging("DEBUG", log_file=log_file, force=True)
        try:
            assert logger.name == "webdistill"
            assert logger.level == logging.DEBUG
            assert len(logger.handlers) == 2
            assert logger.propagate is False

            logging.getLogger("webdistill.video.transcript").warning("Transcript fetch timed out")
            for handler in logger.handlers:
                handler.flush()

            assert "Transcript fetch timed out" in log_file.read_text()
        finally:
            for handler in list(logger.handlers):
                logger.removeHandler(handler)
                handler.close()
            logger.propagate = True
            logger.setLevel(logging.NOTSET)

    def test_keeps_existing_handlers_without_force(self):
        """Test that a second call does not stack handlers."""
        logger = setup_logging("INFO", force=True)
        try:
            setup_logging("WARNING")
            assert len(logger.handlers) == 1
            assert logger.level == logging.WARNING
        finally:
            for handler in list(logger.handlers):
                logger.removeHandler(handler)
                handler.close()
            logger.propagate = True
            logger.setLevel(logging.NOTSET)
