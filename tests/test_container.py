"""Tests for container wiring."""

import asyncio

import pytest

from meal_logger.containers import build_container
from meal_logger.domain.errors import ConfigurationError


def test_build_container_creates_services(settings) -> None:
    container = build_container(settings)

    assert container.meal_log_service is not None
    assert container.stats_service.limit == 200
    assert container.stats_service.default_timezone == "America/Chicago"
    asyncio.run(container.close_resources())


def test_missing_store_credentials_fail_on_use(settings) -> None:
    container = build_container(settings)

    with pytest.raises(ConfigurationError):
        container.stats_service.get_logs(timezone_name="UTC")
