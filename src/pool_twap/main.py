from __future__ import annotations

import argparse
import asyncio
import json
import logging
from pathlib import Path

from .chart import render_chart
from .config import Config, load_config
from .pipeline import TickEventSource, TwapReport, build_report, to_chart_series
from .price import PriceConvention
from .subgraph import SubgraphClient
from .windows import parse_windows, window_label

logger = logging.getLogger(__name__)


def _parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Compute pool TWAP series and render them as an SVG chart.")
    parser.add_argument("--pool", default=None, help="Pool id (defaults to POOL_ID)")
    parser.add_argument("--windows", default=None, help="Comma-separated windows, e.g. 30m,60m,120m")
    parser.add_argument("--decimals-shift", type=int, default=None, help="Divide prices by 10**N")
    parser.add_argument("--invert", action=argparse.BooleanOptionalAction, default=None)
    parser.add_argument("--out", default="twap.svg", help="Output path")
    parser.add_argument("--json", action="store_true", help="Write the report as JSON instead of SVG")
    return parser.parse_args(argv)


def report_to_dict(report: TwapReport) -> dict:
    return {
        "pool_id": report.pool_id,
        "convention": report.convention.describe(),
        "initial_tick": str(report.initial_tick) if report.initial_tick is not None else None,
        "initial_time": report.initial_time,
        "event_count": report.event_count,
        "sample_count": report.sample_count,
        "series": {
            item.label: [
                {
                    "timestamp": point.timestamp,
                    "block": point.block,
                    "twap": str(point.twap),
                    "price": str(point.price) if point.price is not None else None,
                }
                for point in item.points
            ]
            for item in report.series
        },
    }


async def run(
    config: Config,
    args: argparse.Namespace,
    source: TickEventSource | None = None,
) -> Path:
    pool_id = args.pool or config.pool_id
    if not pool_id:
        raise ValueError("a pool id is required (--pool or POOL_ID)")

    windows = parse_windows(args.windows) if args.windows else list(config.twap_windows)
    convention = PriceConvention(
        decimals_shift=config.price_decimals_shift if args.decimals_shift is None else args.decimals_shift,
        invert=config.price_invert if args.invert is None else args.invert,
    )
    if source is None:
        source = SubgraphClient.from_config(config)

    report = await build_report(source, pool_id, windows, convention)

    out_path = Path(args.out)
    out_path.parent.mkdir(parents=True, exist_ok=True)
    if args.json:
        out_path.write_text(json.dumps(report_to_dict(report), indent=2), encoding="utf-8")
    else:
        svg = await asyncio.to_thread(
            render_chart,
            to_chart_series(report),
            title=f"TWAP {', '.join(window_label(value) for value in windows)}",
            width=config.chart_width,
            height=config.chart_height,
            theme=config.chart_theme,
        )
        out_path.write_text(svg, encoding="utf-8")

    logger.info("[TWAP] Wrote %s", out_path)
    return out_path


def main(argv: list[str] | None = None) -> None:
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s - %(message)s",
    )
    args = _parse_args(argv)
    asyncio.run(run(load_config(), args))


if __name__ == "__main__":
    main()
