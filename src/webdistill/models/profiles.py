"""Built-in configuration profiles for the two deployment shapes."""

from __future__ import annotations

from typing import Any

from .config import DistillConfig, ProfileName

PROFILES: dict[ProfileName, dict[str, Any]] = {
    ProfileName.HOSTED: {
        # Request/response budget is tight: return video metadata now,
        # let the client come back for the transcript.
        "video": {
            "two_phase": True,
        },
        "storage": {
            "backend": "sqlite",
        },
    },
    ProfileName.LOCAL: {
        # Single user, no history: wait for captions in one call
        "video": {
            "two_phase": False,
        },
        "timeouts": {
            "transcript": 30.0,
        },
        "storage": {
            "backend": "none",
        },
        "network": {
            "block_private_ips": False,
        },
    },
    ProfileName.CUSTOM: {},
}


def apply_profile(config: DistillConfig) -> DistillConfig:
    """
    Apply profile defaults to config.

    Profile values replace pydantic defaults only. Anything the caller set
    explicitly, at any depth, is kept. Use ``ProfileName.CUSTOM`` to opt out.

    Example:
        >>> applied = apply_profile(DistillConfig(profile=ProfileName.LOCAL))
        >>> applied.timeouts.transcript
        30.0
        >>> applied.storage.backend
        'none'
    """
    if config.profile == ProfileName.CUSTOM:
        return config

    profile_overrides = PROFILES.get(config.profile, {})
    if not profile_overrides:
        return config

    def deep_update(base: dict, overrides: dict) -> dict:
        result = base.copy()
        for key, override_value in overrides.items():
            if key in result and isinstance(result[key], dict) and isinstance(override_value, dict):
                result[key] = deep_update(result[key], override_value)
            else:
                result[key] = override_value
        return result

    merged = deep_update(config.model_dump(), profile_overrides)
    merged = deep_update(merged, config.model_dump(exclude_unset=True))
    return DistillConfig.model_validate(merged)
