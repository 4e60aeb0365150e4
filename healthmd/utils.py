from __future__ import annotations

import datetime as dt
from decimal import Decimal, ROUND_HALF_UP
from typing import Any, Callable, Iterable, Optional

import pytz
import structlog
from tenacity import RetryCallState, retry, retry_if_exception_type, stop_after_attempt, wait_exponential

logger = structlog.get_logger()


def get_tz(name: Optional[str]) -> Optional[pytz.BaseTzInfo]:
    if not name:
        return None
    return pytz.timezone(name)


def localize(instant: dt.datetime, tz_name: Optional[str]) -> dt.datetime:
    """Move an aware instant into ``tz_name``. Naive instants are left as given."""
    tz = get_tz(tz_name)
    if tz is None or instant.tzinfo is None:
        return instant
    return instant.astimezone(tz)


def iso_date(d: dt.date | dt.datetime) -> str:
    if isinstance(d, dt.datetime):
        d = d.date()
    return d.isoformat()


def round_half_up(value: float, places: int = 2) -> float:
    exp = Decimal(1).scaleb(-places)
    q = Decimal(str(value)).quantize(exp, rounding=ROUND_HALF_UP)
    return float(q)


def whole(value: float) -> int:
    return int(Decimal(str(value)).quantize(Decimal(1), rounding=ROUND_HALF_UP))


def fixed(value: float, places: int = 1) -> str:
    """Fixed-point text with half-up rounding (``fixed(2.25, 1) == "2.3"``)."""
    exp = Decimal(1).scaleb(-places)
    q = Decimal(str(value)).quantize(exp, rounding=ROUND_HALF_UP)
    text = f"{q:f}"
    # quantize keeps the sign of a negative zero
    return text[1:] if text.startswith("-") and q == 0 else text


def percent(fraction: float) -> float:
    # decimal multiply so 0.965 gives 96.5, not 96.49999999999999
    return float(Decimal(str(fraction)) * 100)


def format_duration(seconds: float) -> str:
    total = int(seconds)
    hours = total // 3600
    minutes = (total % 3600) // 60
    if hours > 0:
        return f"{hours}h {minutes}m"
    return f"{minutes}m"


def format_number(value: int) -> str:
    return f"{value:,}"


def slugify(value: str) -> str:
    return value.lower().replace(" ", "-")


def unique(values: Iterable[str]) -> list[str]:
    seen: dict[str, None] = {}
    for v in values:
        seen.setdefault(v, None)
    return list(seen)


def plural(count: int, word: str) -> str:
    return f"{count} {word}{'s' if count > 1 else ''}"


def retry_backoff(
    max_attempts: int = 5,
    base: float = 1.0,
    exceptions: tuple[type[BaseException], ...] = (OSError,),
) -> Callable[[Callable[..., Any]], Any]:
    def _before_log(retry_state: RetryCallState) -> None:
        exc = retry_state.outcome.exception() if retry_state.outcome else None
        logger.warning(
            "retrying",
            attempt=retry_state.attempt_number,
            error=str(exc) if exc else None,
        )

    def decorator(fn: Callable[..., Any]) -> Any:
        return retry(
            reraise=True,
            stop=stop_after_attempt(max_attempts),
            wait=wait_exponential(multiplier=base, min=base, max=base * 8),
            retry=retry_if_exception_type(exceptions),
            before_sleep=_before_log,
        )(fn)

    return decorator


def plain_number(value: float) -> str:
    """``28800.0`` -> ``"28800"``, ``96.5`` -> ``"96.5"``."""
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)
