import asyncio
import json
from dataclasses import replace
from decimal import Decimal

import pytest

from src.pool_twap.config import Config
from src.pool_twap.main import _parse_args, run
from src.pool_twap.models import TickEvent


def _config() -> Config:
    return Config(
        subgraph_url="https://index.example.test/ticks",
        pool_id="0xpool",
        twap_windows=(60,),
        subgraph_page_size=1000,
        subgraph_timeout_seconds=5.0,
        subgraph_max_retries=0,
        price_decimals_shift=0,
        price_invert=False,
        chart_width=500,
        chart_height=500,
        chart_theme="dark",
        api_port=8080,
    )


class FakeSource:
    async def fetch_tick_events(self, pool_id: str) -> list[TickEvent]:
        return [
            TickEvent(
                id=f"e{ts}",
                tick=Decimal(tick),
                timestamp=ts,
                block_number=ts,
                log_index=0,
                transaction_log_index=0,
                initial_tick=Decimal(0),
            )
            for ts, tick in ((0, 5), (30, 15), (90, 5))
        ]


def test_run_writes_svg(tmp_path) -> None:
    out = tmp_path / "charts" / "twap.svg"
    args = _parse_args(["--out", str(out)])

    written = asyncio.run(run(_config(), args, source=FakeSource()))

    assert written == out
    assert "<svg" in out.read_text(encoding="utf-8")


def test_run_writes_json_report(tmp_path) -> None:
    out = tmp_path / "report.json"
    args = _parse_args(["--out", str(out), "--json", "--windows", "30s,60s", "--invert"])

    asyncio.run(run(_config(), args, source=FakeSource()))

    body = json.loads(out.read_text(encoding="utf-8"))
    assert body["pool_id"] == "0xpool"
    assert body["convention"] == "inverted"
    assert body["sample_count"] == 3
    assert [point["timestamp"] for point in body["series"]["30 sec"]] == [0, 30]
    assert Decimal(body["series"]["30 sec"][0]["twap"]) == Decimal(5)
    assert [point["timestamp"] for point in body["series"]["1 min"]] == [0, 30]


def test_run_requires_pool(tmp_path) -> None:
    config = replace(_config(), pool_id=None)
    args = _parse_args(["--out", str(tmp_path / "x.svg")])

    with pytest.raises(ValueError, match="pool id is required"):
        asyncio.run(run(config, args, source=FakeSource()))
