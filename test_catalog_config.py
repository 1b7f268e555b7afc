"""
Test Catalog Clients and Engine Configuration
=============================================

ShopRecord parsing, the YAML and HTTP catalogs, and EngineConfig loading.

Usage:
    pytest test_catalog_config.py
"""

from pathlib import Path
from unittest.mock import MagicMock

import pytest
import requests

from delivery_zone import Coordinate
from delivery_pricing import (
    BatchFeeOrchestrator,
    CatalogFetchError,
    ConfigError,
    EngineConfig,
    FeeStatus,
    HttpCatalogClient,
    InMemoryCatalog,
    PricingMode,
    ShopRecord,
    build_orchestrator,
)


SHOP_PAYLOAD = {
    "id": "shop-1",
    "latitude": 24.8607,
    "longitude": 67.0011,
    "delivery_logic": {
        "distance_mode": "custom",
        "max_delivery_fee": 130,
        "distance_tiers": [
            {"max_distance": 500, "fee": 25},
            {"max_distance": 2000, "fee": 45},
        ],
    },
    "delivery_areas": [
        {
            "geom_geojson": {
                "type": "Polygon",
                "coordinates": [[
                    [66.99, 24.85], [67.01, 24.85], [67.01, 24.87], [66.99, 24.87], [66.99, 24.85],
                ]],
            },
        },
    ],
}

CATALOG_YAML = """
shops:
  - id: "shop-1"
    latitude: 24.8607
    longitude: 67.0011
    pricing_policy:
      mode: "auto"
      base_rate: 50
      per_km_rate: 20
      max_delivery_fee: 200
      minimum_order_value: 0
      least_order_value: 0
    delivery_areas:
      - coordinates:
          - {lat: 24.85, lng: 66.99}
          - {lat: 24.85, lng: 67.01}
          - {lat: 24.87, lng: 67.01}
          - {lat: 24.87, lng: 66.99}
  - id: "shop-2"
    latitude: 24.90
    longitude: 67.05
"""


# ============================================================================
# ShopRecord
# ============================================================================

def test_shop_record_from_catalog_payload():
    record = ShopRecord.from_dict(SHOP_PAYLOAD)

    assert record.shop_id == "shop-1"
    assert record.coordinate == Coordinate(24.8607, 67.0011)
    assert record.policy.mode == PricingMode.CUSTOM
    assert [t.fee for t in record.policy.distance_tiers] == [25, 45]
    assert len(record.polygons) == 1
    assert len(record.polygons[0]) == 4


def test_shop_record_with_missing_parts():
    record = ShopRecord.from_dict({"shop_id": 7})

    assert record.shop_id == "7"
    assert record.coordinate is None
    assert record.policy is None
    assert record.polygons == ()


def test_shop_record_requires_id():
    with pytest.raises(ValueError):
        ShopRecord.from_dict({"latitude": 1, "longitude": 2})


# ============================================================================
# InMemoryCatalog
# ============================================================================

@pytest.fixture
def catalog_file(tmp_path):
    path = tmp_path / "shops.yaml"
    path.write_text(CATALOG_YAML)
    return path


def test_in_memory_catalog_from_yaml(catalog_file):
    catalog = InMemoryCatalog.from_yaml(catalog_file)

    assert len(catalog) == 2
    shop = catalog.fetch_shop("shop-1")
    assert shop.policy.base_rate == 50
    assert len(shop.polygons[0]) == 4
    assert catalog.fetch_shop("shop-2").policy is None
    assert catalog.fetch_shop("missing") is None


def test_in_memory_catalog_put():
    catalog = InMemoryCatalog()
    catalog.put(ShopRecord(shop_id="late"))

    assert catalog.fetch_shop("late").shop_id == "late"


def test_in_memory_catalog_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        InMemoryCatalog.from_yaml(tmp_path / "nope.yaml")


def test_in_memory_catalog_invalid_yaml(tmp_path):
    path = tmp_path / "broken.yaml"
    path.write_text("shops: [\n  - id: {")

    with pytest.raises(ValueError):
        InMemoryCatalog.from_yaml(path)


# ============================================================================
# HttpCatalogClient
# ============================================================================

def make_client(response=None, error=None):
    client = HttpCatalogClient(base_url="https://catalog.test/api/", token="secret")
    client.session = MagicMock()
    if error is not None:
        client.session.get.side_effect = error
    else:
        client.session.get.return_value = response
    return client


def make_response(status_code, payload=None):
    response = MagicMock()
    response.status_code = status_code
    response.json.return_value = payload
    if status_code >= 400:
        response.raise_for_status.side_effect = requests.HTTPError(f"{status_code} error")
    return response


def test_http_client_headers():
    client = HttpCatalogClient(base_url="https://catalog.test/api/", token="secret")

    assert client.base_url == "https://catalog.test/api"
    assert client.session.headers["Authorization"] == "Bearer secret"


def test_http_client_requires_url(monkeypatch):
    monkeypatch.delenv("DELIVERY_CATALOG_URL", raising=False)

    with pytest.raises(ValueError):
        HttpCatalogClient()


def test_http_client_fetch():
    client = make_client(make_response(200, SHOP_PAYLOAD))

    record = client.fetch_shop("shop-1")

    assert record.shop_id == "shop-1"
    client.session.get.assert_called_once_with("https://catalog.test/api/shops/shop-1", timeout=5.0)


def test_http_client_not_found_is_none():
    assert make_client(make_response(404)).fetch_shop("shop-9") is None


def test_http_client_server_error():
    with pytest.raises(CatalogFetchError):
        make_client(make_response(500)).fetch_shop("shop-1")


def test_http_client_connection_error():
    client = make_client(error=requests.ConnectionError("refused"))

    with pytest.raises(CatalogFetchError):
        client.fetch_shop("shop-1")


def test_http_client_invalid_json():
    response = make_response(200)
    response.json.side_effect = ValueError("not json")

    with pytest.raises(CatalogFetchError):
        make_client(response).fetch_shop("shop-1")


# ============================================================================
# EngineConfig
# ============================================================================

def test_config_defaults():
    config = EngineConfig()

    assert config.max_workers == 64
    assert config.fetch_timeout_seconds == 5.0
    assert config.logging_level == 20


def test_config_from_yaml(tmp_path, catalog_file):
    path = tmp_path / "engine.yaml"
    path.write_text(
        "max_workers: 4\n"
        "fetch_timeout_seconds: 1.5\n"
        "log_level: debug\n"
        f"catalog_path: {catalog_file}\n"
    )

    config = EngineConfig.from_yaml(path)

    assert config.max_workers == 4
    assert config.fetch_timeout_seconds == 1.5
    assert config.catalog_path == Path(catalog_file)
    assert config.logging_level == 10


@pytest.mark.parametrize("body", [
    "max_workers: 0\n",
    "fetch_timeout_seconds: -1\n",
    "log_level: LOUD\n",
    "max_workers: many\n",
    "max_workers: 1000\n",
    "catalog_path: a.yaml\ncatalog_url: https://x\n",
])
def test_config_from_yaml_rejects_invalid_values(tmp_path, body):
    path = tmp_path / "engine.yaml"
    path.write_text(body)

    with pytest.raises(ConfigError):
        EngineConfig.from_yaml(path)


def test_config_from_yaml_missing_file(tmp_path):
    with pytest.raises(ConfigError):
        EngineConfig.from_yaml(tmp_path / "missing.yaml")


def test_config_from_env(monkeypatch):
    monkeypatch.setenv("DELIVERY_MAX_WORKERS", "3")
    monkeypatch.setenv("DELIVERY_FETCH_TIMEOUT", "0.5")
    monkeypatch.setenv("DELIVERY_LOG_LEVEL", "WARNING")
    monkeypatch.setenv("DELIVERY_CATALOG_URL", "https://catalog.test")
    monkeypatch.delenv("DELIVERY_CATALOG_PATH", raising=False)

    config = EngineConfig.from_env()

    assert config.max_workers == 3
    assert config.fetch_timeout_seconds == 0.5
    assert config.catalog_url == "https://catalog.test"
    assert config.catalog_path is None


def test_config_from_env_invalid(monkeypatch):
    monkeypatch.setenv("DELIVERY_MAX_WORKERS", "lots")

    with pytest.raises(ConfigError):
        EngineConfig.from_env()


def test_build_orchestrator_from_yaml_catalog(catalog_file):
    config = EngineConfig(max_workers=2, fetch_timeout_seconds=1.0, catalog_path=catalog_file)

    orchestrator = build_orchestrator(config)
    fees = orchestrator.evaluate_cart(
        ["shop-1", "shop-2"],
        {"shop-1": 500, "shop-2": 500},
        Coordinate(24.861, 67.001),
    )

    assert isinstance(orchestrator, BatchFeeOrchestrator)
    assert orchestrator.max_workers == 2
    assert fees["shop-1"].status == FeeStatus.PRICED
    assert fees["shop-2"].status == FeeStatus.UNCONFIGURED


def test_build_orchestrator_without_catalog_source():
    with pytest.raises(ConfigError):
        build_orchestrator(EngineConfig())
