from __future__ import annotations

import json
import os
import sys
from typing import Any, Optional

import click

from .config import MissingConfigurationError, get_settings
from .http_client import APIClient
from .options import build_query, interval_option, ratios_option, symbols_option


def _echo_json(payload: Any) -> None:
    click.echo(json.dumps(payload, indent=2, default=str))


def _prepare_client(base_url: Optional[str]) -> APIClient:
    try:
        settings = get_settings(base_url=base_url)
    except MissingConfigurationError as exc:
        raise click.ClickException(str(exc)) from exc
    return APIClient(settings=settings)


@click.group()
@click.option("--base-url", envvar="PRICE_API_BASE_URL", help="API base URL (env: PRICE_API_BASE_URL)")
@click.pass_context
def cli(ctx: click.Context, base_url: Optional[str]) -> None:
    """Price API command line wrapper."""

    ctx.obj = {"client": _prepare_client(base_url)}


@cli.command()
@click.pass_context
def health(ctx: click.Context) -> None:
    """Check that the API is up."""

    client: APIClient = ctx.obj["client"]
    _echo_json(client.get("/health"))


@cli.command()
@click.argument("symbol")
@interval_option
@click.pass_context
def price(ctx: click.Context, symbol: str, interval: str) -> None:
    """Fetch the price history of one symbol."""

    client: APIClient = ctx.obj["client"]
    payload = client.get(f"/price/{symbol}", params=build_query(interval=interval.lower()))
    _echo_json(payload)


@cli.command()
@symbols_option
@ratios_option
@interval_option
@click.pass_context
def aggregate(ctx: click.Context, symbols: list[str], ratios: list[float], interval: str) -> None:
    """Fetch the weighted aggregate series of several symbols."""

    if len(symbols) != len(ratios):
        raise click.BadParameter("Number of symbols must match number of ratios", param_hint="--ratios")
    client: APIClient = ctx.obj["client"]
    payload = client.get("/aggregate", params=build_query(symbols=symbols, ratios=ratios, interval=interval.lower()))
    _echo_json(payload)


@cli.command()
@symbols_option
@ratios_option
@click.pass_context
def pnl(ctx: click.Context, symbols: list[str], ratios: list[float]) -> None:
    """Fetch the 30d percentage gain/loss of a weighted aggregate."""

    if len(symbols) != len(ratios):
        raise click.BadParameter("Number of symbols must match number of ratios", param_hint="--ratios")
    client: APIClient = ctx.obj["client"]
    payload = client.get("/aggregate/pnl", params=build_query(symbols=symbols, ratios=ratios))
    _echo_json(payload)


@cli.command()
@symbols_option
@interval_option
@click.pass_context
def batch(ctx: click.Context, symbols: list[str], interval: str) -> None:
    """Fetch the latest price of several symbols."""

    client: APIClient = ctx.obj["client"]
    payload = client.get("/batch", params=build_query(symbols=symbols, interval=interval.lower()))
    _echo_json(payload)


def main(argv: Optional[list[str]] = None) -> None:
    argv = argv if argv is not None else sys.argv[1:]
    cli.main(args=argv, prog_name=os.path.basename(sys.argv[0]))


if __name__ == "__main__":
    main()
