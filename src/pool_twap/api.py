from __future__ import annotations

import asyncio
import logging
import threading
from decimal import Decimal

from fastapi import Depends, FastAPI, HTTPException, Query, Response
from pydantic import BaseModel

from .chart import render_chart
from .config import Config, load_config
from .errors import DataSourceError, EmptyInputError
from .pipeline import TickEventSource, TwapReport, build_report, to_chart_series
from .price import PriceConvention
from .subgraph import SubgraphClient
from .windows import parse_window_seconds, parse_windows, window_label

logger = logging.getLogger(__name__)

app = FastAPI(title="Pool TWAP API", version="0.1.0")

_config: Config | None = None
_lock = threading.Lock()


class TwapPointOut(BaseModel):
    timestamp: int
    block: int | None
    twap: Decimal
    price: Decimal | None


class TwapSeriesResponse(BaseModel):
    pool_id: str
    window: str
    window_seconds: int
    convention: str
    initial_tick: Decimal | None
    initial_time: int | None
    sample_count: int
    points: list[TwapPointOut]


def get_config() -> Config:
    global _config

    if _config is not None:
        return _config
    with _lock:
        if _config is None:
            _config = load_config()
    return _config


def get_source(config: Config = Depends(get_config)) -> TickEventSource:
    return SubgraphClient.from_config(config)


def _resolve_convention(config: Config, decimals_shift: int | None, invert: bool | None) -> PriceConvention:
    return PriceConvention(
        decimals_shift=config.price_decimals_shift if decimals_shift is None else decimals_shift,
        invert=config.price_invert if invert is None else invert,
    )


async def _run_report(
    source: TickEventSource,
    pool_id: str,
    windows: list[int],
    convention: PriceConvention,
) -> TwapReport:
    try:
        return await build_report(source, pool_id, windows, convention)
    except EmptyInputError as exc:
        raise HTTPException(status_code=404, detail=f"no tick events for pool {pool_id}") from exc
    except DataSourceError as exc:
        logger.error("[TWAP] Data source failure for %s: %s", pool_id, exc)
        raise HTTPException(status_code=502, detail=str(exc)) from exc


@app.get("/healthz")
async def healthz() -> dict:
    return {"ok": True}


@app.get("/pools/{pool_id}/twap")
async def get_twap(
    pool_id: str,
    window: str = Query(default="30m"),
    decimals_shift: int | None = Query(default=None, ge=-36, le=36),
    invert: bool | None = Query(default=None),
    config: Config = Depends(get_config),
    source: TickEventSource = Depends(get_source),
) -> dict:
    try:
        window_seconds = parse_window_seconds(window)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc

    convention = _resolve_convention(config, decimals_shift, invert)
    report = await _run_report(source, pool_id, [window_seconds], convention)
    series = report.series[0]

    response = TwapSeriesResponse(
        pool_id=report.pool_id,
        window=series.label,
        window_seconds=series.window_seconds,
        convention=convention.describe(),
        initial_tick=report.initial_tick,
        initial_time=report.initial_time,
        sample_count=report.sample_count,
        points=[
            TwapPointOut(timestamp=point.timestamp, block=point.block, twap=point.twap, price=point.price)
            for point in series.points
        ],
    )
    return response.model_dump(mode="json")


@app.get("/pools/{pool_id}/chart.svg")
async def get_chart(
    pool_id: str,
    windows: str | None = Query(default=None),
    decimals_shift: int | None = Query(default=None, ge=-36, le=36),
    invert: bool | None = Query(default=None),
    config: Config = Depends(get_config),
    source: TickEventSource = Depends(get_source),
) -> Response:
    try:
        window_values = parse_windows(windows) if windows else list(config.twap_windows)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc

    convention = _resolve_convention(config, decimals_shift, invert)
    report = await _run_report(source, pool_id, window_values, convention)
    svg = await asyncio.to_thread(
        render_chart,
        to_chart_series(report),
        title=f"TWAP {', '.join(window_label(value) for value in window_values)}",
        width=config.chart_width,
        height=config.chart_height,
        theme=config.chart_theme,
    )
    return Response(content=svg, media_type="image/svg+xml")
