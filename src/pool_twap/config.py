from __future__ import annotations

import os
from dataclasses import dataclass

from dotenv import load_dotenv

from .price import PriceConvention
from .windows import DEFAULT_WINDOWS, parse_windows


@dataclass(frozen=True)
class Config:
    subgraph_url: str
    pool_id: str | None
    twap_windows: tuple[int, ...]
    subgraph_page_size: int
    subgraph_timeout_seconds: float
    subgraph_max_retries: int
    price_decimals_shift: int
    price_invert: bool
    chart_width: int
    chart_height: int
    chart_theme: str
    api_port: int

    @property
    def price_convention(self) -> PriceConvention:
        return PriceConvention(decimals_shift=self.price_decimals_shift, invert=self.price_invert)



def _bool_from_env(value: str | None, default: bool) -> bool:
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}



def _int_from_env(name: str, default: str, minimum: int | None = None) -> int:
    raw = os.getenv(name, default).strip()
    try:
        value = int(raw)
    except ValueError as exc:
        raise ValueError(f"{name} must be an integer, got {raw!r}") from exc
    if minimum is not None and value < minimum:
        raise ValueError(f"{name} must be >= {minimum}")
    return value



def load_config() -> Config:
    load_dotenv()

    subgraph_url = os.getenv("SUBGRAPH_URL", "").strip()
    if not subgraph_url:
        raise ValueError("SUBGRAPH_URL is required")

    try:
        twap_windows = tuple(parse_windows(os.getenv("TWAP_WINDOWS", DEFAULT_WINDOWS)))
    except ValueError as exc:
        raise ValueError(f"TWAP_WINDOWS is invalid: {exc}") from exc

    chart_theme = os.getenv("CHART_THEME", "dark").strip().lower()
    if chart_theme not in {"dark", "light"}:
        raise ValueError("CHART_THEME must be 'dark' or 'light'")

    raw_timeout = os.getenv("SUBGRAPH_TIMEOUT_SECONDS", "15").strip()
    try:
        subgraph_timeout_seconds = float(raw_timeout)
    except ValueError as exc:
        raise ValueError(f"SUBGRAPH_TIMEOUT_SECONDS must be a number, got {raw_timeout!r}") from exc

    return Config(
        subgraph_url=subgraph_url,
        pool_id=os.getenv("POOL_ID", "").strip().lower() or None,
        twap_windows=twap_windows,
        subgraph_page_size=_int_from_env("SUBGRAPH_PAGE_SIZE", "1000", minimum=1),
        subgraph_timeout_seconds=subgraph_timeout_seconds,
        subgraph_max_retries=_int_from_env("SUBGRAPH_MAX_RETRIES", "2", minimum=0),
        price_decimals_shift=_int_from_env("PRICE_DECIMALS_SHIFT", "0"),
        price_invert=_bool_from_env(os.getenv("PRICE_INVERT"), False),
        chart_width=_int_from_env("CHART_WIDTH", "500", minimum=50),
        chart_height=_int_from_env("CHART_HEIGHT", "500", minimum=50),
        chart_theme=chart_theme,
        api_port=_int_from_env("API_PORT", "8080"),
    )
