from __future__ import annotations

import time


def start_timer() -> float:
    return time.perf_counter()


def elapsed_ms(started: float) -> int:
    return int((time.perf_counter() - started) * 1000)


def format_duration(milliseconds: int) -> str:
    return f"{milliseconds}ms"
