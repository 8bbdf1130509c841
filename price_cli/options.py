from __future__ import annotations

from typing import Any, Callable, Dict, Optional

import click

INTERVAL_CHOICES = ["24h", "7d", "30d"]


def _csv_to_list(_: click.Context, __: click.Parameter, value: Optional[str]) -> Optional[list[str]]:
    if value is None:
        return None
    parts = [item.strip() for item in value.split(",") if item.strip()]
    if not parts:
        raise click.BadParameter("Provide at least one comma-separated value.")
    return parts


def _csv_to_floats(ctx: click.Context, param: click.Parameter, value: Optional[str]) -> Optional[list[float]]:
    parts = _csv_to_list(ctx, param, value)
    if parts is None:
        return None
    try:
        return [float(part) for part in parts]
    except ValueError as exc:
        raise click.BadParameter("Ratios must be numbers, e.g. 60,40 or 0.6,0.4.") from exc


def symbols_option(func: Callable[..., Any]) -> Callable[..., Any]:
    return click.option(
        "--symbols", required=True, callback=_csv_to_list, help="Comma-separated symbols, e.g. ETH,BTC."
    )(func)


def ratios_option(func: Callable[..., Any]) -> Callable[..., Any]:
    return click.option(
        "--ratios", required=True, callback=_csv_to_floats, help="Comma-separated weights, one per symbol."
    )(func)


def interval_option(func: Callable[..., Any]) -> Callable[..., Any]:
    return click.option(
        "--interval",
        default="24h",
        show_default=True,
        type=click.Choice(INTERVAL_CHOICES, case_sensitive=False),
    )(func)


def build_query(**kwargs: Any) -> Dict[str, Any]:
    """Drop unset values and join list values back into the API's comma form."""

    params: Dict[str, Any] = {}
    for key, value in kwargs.items():
        if value is None:
            continue
        if isinstance(value, (list, tuple)):
            value = ",".join(_format(item) for item in value)
        params[key] = value
    return params


def _format(item: Any) -> str:
    if isinstance(item, float) and item.is_integer():
        return str(int(item))
    return str(item)
