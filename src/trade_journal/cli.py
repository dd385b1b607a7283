"""CLI entry point for the trade journal."""

from __future__ import annotations

import base64
import mimetypes
from pathlib import Path

import click

from .core.enums import FilterPreset, TradeDirection, TradeStatus
from .core.errors import JournalError
from .journal.record import MODEL_CHOICES, TIMEFRAME_CHOICES


def _open_session(ctx: click.Context):
    from .journal.session import JournalSession

    return JournalSession.open(ctx.obj["settings"])


def _apply_filter(session, start: str | None, end: str | None, preset: str | None) -> None:
    from .journal.filters import DateRange

    if preset:
        session.apply_preset(preset)
        return
    rng = DateRange.parse(start, end)
    session.set_range(rng.start, rng.end)


def _filter_options(f):
    f = click.option("--preset", type=click.Choice([p.value for p in FilterPreset]), default=None,
                     help="Named range (overrides --start/--end)")(f)
    f = click.option("--end", default=None, help="Last day, inclusive (YYYY-MM-DD)")(f)
    f = click.option("--start", default=None, help="First day, inclusive (YYYY-MM-DD)")(f)
    return f


def load_screenshot(path: str) -> str:
    """Read an image file as a ``data:`` URL."""
    mime = mimetypes.guess_type(path)[0] or "image/jpeg"
    encoded = base64.b64encode(Path(path).read_bytes()).decode("ascii")
    return f"data:{mime};base64,{encoded}"


@click.group()
@click.option("--config", default="configs/journal.toml", help="Config file path")
@click.option("--log-level", default=None, help="Override the configured log level")
@click.pass_context
def main(ctx: click.Context, config: str, log_level: str | None) -> None:
    """Personal trading journal."""
    from .core.config import load_settings
    from .observability.logger import new_session_id, setup_logging

    try:
        settings = load_settings(config)
    except JournalError as exc:
        raise click.ClickException(str(exc)) from exc

    setup_logging(
        level=log_level or settings.observability.log_level,
        format=settings.observability.log_format,
    )
    new_session_id()
    ctx.obj = {"settings": settings}


@main.command()
@click.option("--date", "date_", default=None, help="Trade time (YYYY-MM-DDTHH:MM), default now")
@click.option("--source", "price_source", required=True, help="Price source / quote timeframe")
@click.option("--timeframe", required=True, help="Chart timeframe analysed, e.g. " + ", ".join(TIMEFRAME_CHOICES))
@click.option("--model", required=True, help="Entry model / setup name, e.g. " + "; ".join(MODEL_CHOICES))
@click.option("--direction", type=click.Choice([d.value for d in TradeDirection], case_sensitive=False),
              default=TradeDirection.LONG.value, show_default=True)
@click.option("--status", type=click.Choice([s.value for s in TradeStatus], case_sensitive=False),
              default=TradeStatus.WIN.value, show_default=True)
@click.option("--entry", "entry_price", default="", help="Entry price")
@click.option("--exit", "exit_price", default="", help="Exit price")
@click.option("--rr", default="", help="Risk to reward ratio")
@click.option("--notes", default="", help="Free-text notes")
@click.option("--screenshot", type=click.Path(exists=True, dir_okay=False), default=None,
              help="Chart screenshot to attach")
@click.option("--analyze", is_flag=True, help="Ask the AI mentor for a review before saving")
@click.pass_context
def add(
    ctx: click.Context,
    date_: str | None,
    price_source: str,
    timeframe: str,
    model: str,
    direction: str,
    status: str,
    entry_price: str,
    exit_price: str,
    rr: str,
    notes: str,
    screenshot: str | None,
    analyze: bool,
) -> None:
    """Log a new trade."""
    import asyncio

    from .journal.record import TradeFormData

    session = _open_session(ctx)
    form = TradeFormData(
        price_source=price_source,
        timeframe=timeframe,
        model=model,
        direction=direction,
        entry_price=entry_price,
        exit_price=exit_price,
        rr=rr,
        status=status,
        notes=notes,
    )
    if date_:
        form.date = date_

    image = load_screenshot(screenshot) if screenshot else None

    review = None
    if analyze:
        click.echo("Analyzing trade...")
        review = asyncio.run(session.request_analysis(form, image))

    try:
        result = session.submit(form, screenshot_base64=image, ai_analysis=review)
    except JournalError as exc:
        raise click.ClickException(str(exc)) from exc

    click.echo(f"Saved trade {result.record.trade_id}")
    if not result.persisted:
        click.echo(
            "Warning: the journal file could not be written; "
            "this trade exists for this session only.",
            err=True,
        )
    if review:
        click.echo("")
        click.echo(review)


@main.command()
@_filter_options
@click.pass_context
def history(ctx: click.Context, start: str | None, end: str | None, preset: str | None) -> None:
    """List trades, most recent first."""
    from .journal.stats import STATUS_COLORS

    session = _open_session(ctx)
    try:
        _apply_filter(session, start, end, preset)
    except JournalError as exc:
        raise click.BadParameter(str(exc)) from exc

    trades = session.history()
    if not trades:
        click.echo("No trades recorded yet.")
        return

    click.echo(f"{'Date':<17} {'Source':<7} {'TF':<4} {'Model':<20} {'Dir':<6} {'Result':<6} {'R:R':>6}  ID")
    for t in trades:
        status = click.style(f"{t.status.value:<6}", fg=_CLICK_COLORS[STATUS_COLORS[t.status]])
        click.echo(
            f"{t.occurred_at:%Y-%m-%d %H:%M} {t.price_source or 'Unknown':<7} {t.timeframe:<4} "
            f"{t.model[:20]:<20} {t.direction.value:<6} {status} {t.rr:>6.2f}  {t.trade_id}"
        )


@main.command()
@_filter_options
@click.pass_context
def stats(ctx: click.Context, start: str | None, end: str | None, preset: str | None) -> None:
    """Show dashboard statistics."""
    from .journal.stats import STATUS_LABELS

    session = _open_session(ctx)
    try:
        _apply_filter(session, start, end, preset)
    except JournalError as exc:
        raise click.BadParameter(str(exc)) from exc

    board = session.dashboard()
    s = board.stats
    if not session.date_range.is_unbounded:
        click.echo(f"Range:        {session.date_range}")
    click.echo(f"Total trades: {s.total_trades}")
    click.echo(f"Win rate:     {s.win_rate:.1f}%")
    click.echo(f"Net R:R:      {s.net_rr:.2f}R")
    click.echo(f"Avg R:R:      {s.avg_rr:.2f}")

    click.echo("\nOutcomes")
    for status, count in board.outcomes.items():
        click.echo(f"  {STATUS_LABELS[status]:<11} {count}")

    if board.model_performance:
        click.echo("\nWin rate by model")
        for name, rate in board.model_performance.items():
            click.echo(f"  {name:<22} {rate:5.1f}%")


@main.command()
@click.argument("trade_id")
@click.pass_context
def show(ctx: click.Context, trade_id: str) -> None:
    """Show one trade in full."""
    session = _open_session(ctx)
    t = session.store.get(trade_id)
    if t is None:
        raise click.ClickException(f"No trade with id {trade_id}")

    click.echo(f"Trade {t.trade_id}")
    click.echo(f"  Date:       {t.occurred_at:%Y-%m-%d %H:%M}")
    click.echo(f"  Source:     {t.price_source}")
    click.echo(f"  Timeframe:  {t.timeframe}")
    click.echo(f"  Model:      {t.model}")
    click.echo(f"  Direction:  {t.direction.value}")
    click.echo(f"  Result:     {t.status.value}")
    click.echo(f"  Entry/Exit: {t.entry_price} / {t.exit_price}")
    click.echo(f"  R:R:        {t.rr}")
    click.echo(f"  Screenshot: {'yes' if t.has_screenshot else 'no'}")
    if t.notes:
        click.echo(f"\nNotes\n{t.notes}")
    if t.ai_analysis:
        click.echo(f"\nAI analysis\n{t.ai_analysis}")


# Terminal stand-ins for the dashboard hex colours.
_CLICK_COLORS = {
    "#10B981": "green",
    "#EF4444": "red",
    "#F59E0B": "yellow",
}
