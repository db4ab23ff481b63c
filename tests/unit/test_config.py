import pytest

from src.pool_twap.config import load_config
from src.pool_twap.price import PriceConvention


def test_load_config_requires_subgraph_url(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("SUBGRAPH_URL", "")

    with pytest.raises(ValueError, match="SUBGRAPH_URL is required"):
        load_config()


def test_load_config_parses_expected_values(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("SUBGRAPH_URL", "https://index.example.test/subgraphs/name/ticks")
    monkeypatch.setenv("POOL_ID", "0x8AD599C3A0FF1DE082011EFDDC58F1908EB6E6D8")
    monkeypatch.setenv("TWAP_WINDOWS", "15m,1h")
    monkeypatch.setenv("SUBGRAPH_PAGE_SIZE", "500")
    monkeypatch.setenv("SUBGRAPH_TIMEOUT_SECONDS", "7.5")
    monkeypatch.setenv("SUBGRAPH_MAX_RETRIES", "4")
    monkeypatch.setenv("PRICE_DECIMALS_SHIFT", "12")
    monkeypatch.setenv("PRICE_INVERT", "true")
    monkeypatch.setenv("CHART_WIDTH", "800")
    monkeypatch.setenv("CHART_HEIGHT", "400")
    monkeypatch.setenv("CHART_THEME", "light")
    monkeypatch.setenv("API_PORT", "9090")

    cfg = load_config()

    assert cfg.subgraph_url == "https://index.example.test/subgraphs/name/ticks"
    assert cfg.pool_id == "0x8ad599c3a0ff1de082011efddc58f1908eb6e6d8"
    assert cfg.twap_windows == (900, 3600)
    assert cfg.subgraph_page_size == 500
    assert cfg.subgraph_timeout_seconds == 7.5
    assert cfg.subgraph_max_retries == 4
    assert cfg.price_decimals_shift == 12
    assert cfg.price_invert is True
    assert cfg.price_convention == PriceConvention(decimals_shift=12, invert=True)
    assert cfg.chart_width == 800
    assert cfg.chart_height == 400
    assert cfg.chart_theme == "light"
    assert cfg.api_port == 9090


def test_load_config_defaults(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("SUBGRAPH_URL", "https://index.example.test/ticks")
    for name in (
        "POOL_ID",
        "TWAP_WINDOWS",
        "SUBGRAPH_PAGE_SIZE",
        "SUBGRAPH_TIMEOUT_SECONDS",
        "SUBGRAPH_MAX_RETRIES",
        "PRICE_DECIMALS_SHIFT",
        "PRICE_INVERT",
        "CHART_WIDTH",
        "CHART_HEIGHT",
        "CHART_THEME",
        "API_PORT",
    ):
        monkeypatch.delenv(name, raising=False)

    cfg = load_config()

    assert cfg.pool_id is None
    assert cfg.twap_windows == (1800, 3600, 7200)
    assert cfg.subgraph_page_size == 1000
    assert cfg.subgraph_max_retries == 2
    assert cfg.price_convention == PriceConvention.raw()
    assert cfg.chart_theme == "dark"


def test_load_config_rejects_bad_windows(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("SUBGRAPH_URL", "https://index.example.test/ticks")
    monkeypatch.setenv("TWAP_WINDOWS", "30q")

    with pytest.raises(ValueError, match="TWAP_WINDOWS is invalid"):
        load_config()


def test_load_config_rejects_non_integer_page_size(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("SUBGRAPH_URL", "https://index.example.test/ticks")
    monkeypatch.setenv("TWAP_WINDOWS", "30m")
    monkeypatch.setenv("SUBGRAPH_PAGE_SIZE", "lots")

    with pytest.raises(ValueError, match="SUBGRAPH_PAGE_SIZE must be an integer"):
        load_config()
