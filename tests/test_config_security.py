from __future__ import annotations

import pytest
from pydantic import ValidationError

from tutorbook.core.config import Settings


def test_default_secret_key_allowed_in_development() -> None:
    settings = Settings(_env_file=None, app_env="development", secret_key="change-me")
    assert settings.secret_key == "change-me"


def test_default_secret_key_rejected_in_production() -> None:
    with pytest.raises(ValidationError):
        Settings(_env_file=None, app_env="production", secret_key="change-me")


def test_placeholder_secret_key_prefix_rejected_in_production() -> None:
    with pytest.raises(ValidationError):
        Settings(_env_file=None, app_env="prod", secret_key="change-me-in-production")


def test_wildcard_cors_origin_rejected_in_production() -> None:
    with pytest.raises(ValidationError):
        Settings(
            _env_file=None,
            app_env="production",
            secret_key="super-secure-value",
            cors_origins="https://tutorbook.example, *",
        )


def test_custom_secret_key_allowed_in_production() -> None:
    settings = Settings(_env_file=None, app_env="production", secret_key="super-secure-value")
    assert settings.secret_key == "super-secure-value"


def test_cors_origins_parsed_from_comma_separated_value() -> None:
    settings = Settings(
        _env_file=None,
        cors_origins=" https://a.example ,https://b.example,, ",
    )
    assert settings.cors_origin_list == ["https://a.example", "https://b.example"]
