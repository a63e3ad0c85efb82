"""Coaching commands for tradelog CLI.

``reflect`` is computed locally. ``insights`` and ``coach`` send the
journal to an LLM and need an OpenAI API key.
"""

import logging
import os
from typing import Optional

import click
from rich.markdown import Markdown
from rich.panel import Panel

from tradelog.analytics import reflect as reflect_on
from tradelog.cli.common import (
    console,
    fail,
    format_pnl,
    get_data_store,
    require_analytics_settings,
    require_config,
    require_subscription,
    require_user,
)
from tradelog.config import get_openai_key

logger = logging.getLogger(__name__)


def _require_openai(config: dict) -> None:
    key = get_openai_key(config)
    if not key:
        fail(
            "[red]OpenAI API key not configured.[/red]\n\n"
            "Set [cyan]openai.api_key[/cyan] in your config or export OPENAI_API_KEY.",
            title="Configuration Error",
        )
    os.environ.setdefault("OPENAI_API_KEY", key)


def _coach_model(config: dict) -> Optional[str]:
    return config.get("openai", {}).get("model") or None


def _bullets(items: list[str]) -> str:
    return "\n".join(f"- {item}" for item in items)


@click.command()
@click.option("--last", "last_n", type=int, default=10, show_default=True,
              help="Number of most recent trades to reflect on.")
def reflect(last_n: int) -> None:
    """Reflect on your most recent trades.

    \b
    Examples:
      tradelog reflect
      tradelog reflect --last 20
    """
    config = require_config()
    user_id = require_user(config)
    store = get_data_store(config)
    require_subscription(config, store, user_id)

    result = reflect_on(store.list_trades(user_id), last_n=last_n)

    if result.trade_count == 0:
        console.print(Panel(
            f"{result.behavior}\n\n{_bullets(result.recommendations)}",
            title="[bold]Reflection[/bold]",
            border_style="dim",
        ))
        return

    text = (
        f"[bold]Last {result.trade_count} trades[/bold]\n\n"
        f"Win Rate:   {result.win_rate:.1f}%\n"
        f"Avg P&L:    {format_pnl(result.avg_pnl)}\n"
        f"Total P&L:  {format_pnl(result.total_pnl)}\n"
        f"Best Pair:  {result.best_ticker or '-'}\n"
        f"Best Day:   {result.best_day.isoformat() if result.best_day else '-'}\n\n"
        f"[bold]Behavior[/bold]\n{result.behavior}"
    )
    if result.recommendations:
        text += f"\n\n[bold]Recommendations[/bold]\n{_bullets(result.recommendations)}"

    console.print(Panel(
        text,
        title="[bold cyan]Reflection[/bold cyan]",
        border_style="cyan",
    ))


@click.command()
@click.option("--ask", default=None, help="Specific question for the coach.")
@click.option("--window", type=int, default=None,
              help="Number of recent trades to analyze. Defaults to analytics.insight_window.")
def insights(ask: Optional[str], window: Optional[int]) -> None:
    """Get structured AI insights on your recent trades.

    \b
    Examples:
      tradelog insights
      tradelog insights --window 50 --ask "Why do I lose on Fridays?"
    """
    config = require_config()
    rr_policy, default_window = require_analytics_settings(config)
    user_id = require_user(config)
    store = get_data_store(config)
    require_subscription(config, store, user_id)
    _require_openai(config)

    window = window or default_window

    journal = store.list_trades(user_id)
    if not journal:
        console.print("[dim]No trades yet. Log some with[/dim] [cyan]tradelog add[/cyan]")
        return

    console.print("[dim]Generating AI insights...[/dim]\n")
    try:
        from tradelog.agents.coach import CoachAgent

        insight = CoachAgent(model=_coach_model(config)).insights(
            journal, ask=ask, window=window, rr_policy=rr_policy
        )
    except ImportError as e:
        fail(
            f"[red]Missing dependency: {e}[/red]\n\n"
            "Please install the required packages:\n"
            "[cyan]pip install openai-agents[/cyan]",
            title="Import Error",
        )
    except Exception as e:
        logger.debug("Insight generation failed", exc_info=True)
        fail(f"[red]Could not generate insights: {e}[/red]")

    sections = [insight.summary]
    for heading, items in (
        ("Strengths", insight.strengths),
        ("Weaknesses", insight.weaknesses),
        ("Recommendations", insight.recommendations),
        ("Next actions", insight.next_actions),
    ):
        if items:
            sections.append(f"### {heading}\n{_bullets(items)}")

    console.print(Panel(
        Markdown("\n\n".join(sections)),
        title="[bold cyan]AI Insights[/bold cyan]",
        border_style="cyan",
    ))


@click.command()
@click.argument("question")
def coach(question: str) -> None:
    """Ask the AI mentor a question about your trading.

    QUESTION is answered with your journal as context.

    \b
    Examples:
      tradelog coach "Am I overtrading in the afternoon?"
    """
    config = require_config()
    user_id = require_user(config)
    store = get_data_store(config)
    require_subscription(config, store, user_id)
    _require_openai(config)

    try:
        from tradelog.agents.coach import CoachAgent

        answer = CoachAgent(model=_coach_model(config)).chat(question, store.list_trades(user_id))
    except ImportError as e:
        fail(
            f"[red]Missing dependency: {e}[/red]\n\n"
            "Please install the required packages:\n"
            "[cyan]pip install openai-agents[/cyan]",
            title="Import Error",
        )
    except Exception as e:
        logger.debug("Coach request failed", exc_info=True)
        fail(f"[red]Error processing question: {e}[/red]")

    console.print(Panel(
        Markdown(answer),
        title="[bold cyan]Coach[/bold cyan]",
        border_style="cyan",
    ))
