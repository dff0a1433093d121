"""
Tests for adapter selection in the wiring layer.
"""

import pytest

from orderflow.core.config import settings
from orderflow.infrastructure.mock.mock_delivery_source import ScriptedDeliverySource
from orderflow.wiring import dependencies


def test_mocks_in_dev_without_base_url(monkeypatch):
    monkeypatch.setattr(settings, "API_BASE_URL", None)
    monkeypatch.setattr(settings, "ENV", "dev")
    assert dependencies._use_mocks() is True


def test_base_url_selects_http_adapters(monkeypatch):
    monkeypatch.setattr(settings, "API_BASE_URL", "https://api.example.com/api")
    monkeypatch.setattr(settings, "ENV", "prod")
    assert dependencies._use_mocks() is False


def test_production_requires_base_url(monkeypatch):
    monkeypatch.setattr(settings, "API_BASE_URL", None)
    monkeypatch.setattr(settings, "ENV", "prod")
    with pytest.raises(ValueError):
        dependencies._use_mocks()


def test_reconciler_uses_configured_interval(monkeypatch):
    monkeypatch.setattr(settings, "DELIVERY_POLL_INTERVAL_SECONDS", 12.5)
    reconciler = dependencies.make_delivery_reconciler("o1", source=ScriptedDeliverySource())
    assert reconciler.interval_seconds == 12.5
    assert reconciler.order_id == "o1"


@pytest.mark.asyncio
async def test_close_api_client_closes_and_forgets_shared_client(monkeypatch):
    monkeypatch.setattr(settings, "API_BASE_URL", "https://api.example.com/api")
    dependencies.get_api_client.cache_clear()
    client = dependencies.get_api_client()
    assert client.closed is False

    await dependencies.close_api_client()

    assert client.closed is True
    assert dependencies.get_api_client.cache_info().currsize == 0
    # nothing built, nothing to close
    await dependencies.close_api_client()
