from __future__ import annotations

import io
import logging
import threading
from typing import Sequence

from matplotlib import style as mpl_style
from matplotlib.figure import Figure

from .models import ChartSeries

logger = logging.getLogger(__name__)

_STYLES = {
    "dark": "dark_background",
    "light": "default",
}
_DPI = 100

# Style contexts swap process-wide rcParams.
_style_lock = threading.Lock()


def render_chart(
    series: Sequence[ChartSeries],
    *,
    title: str,
    width: int = 500,
    height: int = 500,
    theme: str = "dark",
) -> str:
    """Draw one line per series and return the chart as an SVG document.

    The figure is created, drawn and released inside a style context, so no
    pyplot or rcParams state outlives the call.
    """
    style = _STYLES.get(theme)
    if style is None:
        raise ValueError(f"unsupported chart theme: {theme}")

    with _style_lock, mpl_style.context(style):
        fig = Figure(figsize=(width / _DPI, height / _DPI), dpi=_DPI)
        try:
            ax = fig.subplots()
            for item in series:
                if len(item.x) != len(item.y):
                    raise ValueError(f"series {item.name!r} has mismatched x/y lengths")
                ax.plot(item.x, item.y, linewidth=1.2, label=item.name)

            ax.set_title(title)
            ax.set_xlabel("Block")
            ax.set_ylabel("Price")
            ax.ticklabel_format(axis="x", style="plain", useOffset=False)
            ax.grid(True, alpha=0.2)
            if series:
                ax.legend(loc="best")
            fig.tight_layout()

            buffer = io.StringIO()
            fig.savefig(buffer, format="svg")
        finally:
            fig.clear()

    logger.debug("[Chart] Rendered %s series for %r", len(series), title)
    return buffer.getvalue()
