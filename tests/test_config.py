"""
Unit tests for configuration
"""

import pytest


def test_config_loading():
    """Test that configuration loads correctly"""
    from config.config import (
        DATABASE_URL,
        JWT_ALGORITHM,
        JWT_EXPIRE_DAYS,
        OPENAI_MODEL,
        OPENAI_MAX_TOKENS,
    )

    assert DATABASE_URL
    assert JWT_ALGORITHM == "HS256"
    assert JWT_EXPIRE_DAYS == 7
    assert OPENAI_MODEL
    assert OPENAI_MAX_TOKENS > 0


def test_validate_config_ok(monkeypatch):
    import config.config as cfg

    monkeypatch.setattr(cfg, "ENVIRONMENT", "development")
    monkeypatch.setattr(cfg, "JWT_SECRET", "test-secret")

    assert cfg.validate_config() is True


def test_validate_config_rejects_default_secret_in_production(monkeypatch):
    import config.config as cfg

    monkeypatch.setattr(cfg, "ENVIRONMENT", "production")
    monkeypatch.setattr(cfg, "JWT_SECRET", "change-me-in-production")

    with pytest.raises(ValueError, match="JWT_SECRET must be changed"):
        cfg.validate_config()


def test_validate_config_collects_all_errors(monkeypatch):
    import config.config as cfg

    monkeypatch.setattr(cfg, "JWT_SECRET", "")
    monkeypatch.setattr(cfg, "OPENAI_TIMEOUT", 0)

    with pytest.raises(ValueError) as exc_info:
        cfg.validate_config()

    message = str(exc_info.value)
    assert "JWT_SECRET is required" in message
    assert "OPENAI_TIMEOUT must be positive" in message


def test_level_for_points():
    from config.progression_config import level_for_points

    assert level_for_points(0) == 1
    assert level_for_points(99) == 1
    assert level_for_points(100) == 2
    assert level_for_points(250) == 3
    assert level_for_points(1000) == 11


def test_premium_plans():
    from config.progression_config import get_plan_pricing

    monthly = get_plan_pricing("monthly")
    yearly = get_plan_pricing("yearly")

    assert (monthly.price, monthly.duration_months) == (299, 1)
    assert (yearly.price, yearly.duration_months) == (1999, 12)

    with pytest.raises(KeyError):
        get_plan_pricing("weekly")


def test_place_categories():
    from config.progression_config import PLACE_CATEGORIES

    ids = [c["id"] for c in PLACE_CATEGORIES]
    assert len(ids) == 10
    assert len(set(ids)) == 10
    assert {"restaurant", "park", "museum", "hotel"} <= set(ids)


def test_sentry_hook_drops_client_errors_and_masks_credentials():
    from config.sentry import before_send_hook
    from src.core.exceptions import ConflictError, StorageError

    conflict = ConflictError("You have already completed this quest")
    assert before_send_hook({}, {"exc_info": (type(conflict), conflict, None)}) is None

    failure = StorageError("Failed to activate premium")
    event = {
        "request": {
            "headers": {"Authorization": "Bearer abc"},
            "data": {"login": "walker", "password": "secret123"},
        }
    }
    sent = before_send_hook(event, {"exc_info": (type(failure), failure, None)})

    assert sent["request"]["headers"]["Authorization"] == "[Filtered]"
    assert sent["request"]["data"]["password"] == "[Filtered]"
    assert sent["request"]["data"]["login"] == "walker"
