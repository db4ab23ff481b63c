from __future__ import annotations

DEFAULT_WINDOWS = "30m,60m,120m"

_FACTORS = {
    "s": 1,
    "m": 60,
    "h": 3600,
    "d": 86400,
}


def parse_window_seconds(window: str) -> int:
    value = window.strip().lower()
    if not value:
        raise ValueError("window must not be empty")

    unit = value[-1]
    if unit.isdigit():
        unit = "s"
        number_text = value
    else:
        number_text = value[:-1]

    if unit not in _FACTORS:
        raise ValueError(f"unsupported window unit: {unit}")

    try:
        number = int(number_text)
    except ValueError as exc:
        raise ValueError(f"invalid window: {window!r}") from exc
    if number <= 0:
        raise ValueError("window must be > 0")

    return number * _FACTORS[unit]


def parse_windows(raw: str) -> list[int]:
    windows = [parse_window_seconds(part) for part in raw.split(",") if part.strip()]
    if not windows:
        raise ValueError("at least one window is required")
    return windows


def window_label(seconds: int) -> str:
    if seconds % 60:
        return f"{seconds} sec"
    return f"{seconds // 60} min"
