"""Coach agent for journal insights.

Sends a compact view of recent trades, together with locally computed
statistics, to an LLM and turns its reply into an :class:`Insight`.
"""

import json
import re
from typing import Iterable, Optional

from agents import Agent
from pydantic import ValidationError

from tradelog.agents.base import create_agent, run_agent_sync
from tradelog.analytics import RRPolicy, as_trades, summarize
from tradelog.analytics.snapshot import TradeLike
from tradelog.config import DEFAULT_INSIGHT_WINDOW
from tradelog.models import Insight, Trade


COACH_INSTRUCTIONS = """You are a trading journal analyst.
Return a concise JSON object with the following shape:
{
  "summary": "string",
  "metrics": {
    "window_size": number,
    "wins": number,
    "losses": number,
    "win_rate": number,
    "avg_pnl": number,
    "total_pnl": number,
    "best_ticker": "string|null",
    "best_ticker_pnl": number
  },
  "strengths": ["..."],
  "weaknesses": ["..."],
  "recommendations": ["..."],
  "next_actions": ["..."]
}
Use the precomputed summary for numbers rather than recomputing them.
Reply with the JSON object only. Keep it practical for a day trader.
"""

MENTOR_INSTRUCTIONS = """You are a professional trading mentor.
Give specific insights from the trader's journal data.
Be concise, motivational, and data-driven.
"""

_FENCE_RE = re.compile(r"^```(?:json)?\s*(.*?)\s*```$", re.DOTALL)

_CAMEL_KEYS = {"nextActions": "next_actions"}


def compact_trade(trade: Trade) -> dict:
    """Reduce a trade to the fields worth sending to the model."""
    return {
        "date": trade.date.isoformat(),
        "ticker": trade.ticker,
        "entry_time": trade.entry_time,
        "exit_time": trade.exit_time,
        "pnl": round(trade.pnl, 2),
        "final_rr": round(trade.rr, 2) if trade.rr is not None else None,
        "confluences": trade.confluences,
        "done_right": trade.done_right,
        "done_wrong": trade.done_wrong,
        "what_to_improve": trade.what_to_improve,
    }


def recent_trades(trades: Iterable[TradeLike], window: int) -> list[Trade]:
    """The ``window`` most recent trades, oldest first."""
    ordered = sorted(as_trades(trades), key=lambda t: t.date)
    return ordered[-window:] if window > 0 else []


def build_insight_prompt(
    trades: Iterable[TradeLike],
    ask: Optional[str] = None,
    window: int = DEFAULT_INSIGHT_WINDOW,
    rr_policy: RRPolicy = RRPolicy.DEFINED_ONLY,
) -> str:
    """Serialize recent trades and their summary as the user message.

    Args:
        trades: Trade snapshot.
        ask: Optional specific question from the trader.
        window: Number of most recent trades to include.
        rr_policy: R:R averaging policy for the summary.

    Returns:
        JSON document for the coach agent.
    """
    recent = recent_trades(trades, window)
    summary = summarize(recent, rr_policy=rr_policy)
    payload = {
        "instruction": "Analyze the last N trades and return the JSON object.",
        "ask": ask,
        "window_size": len(recent),
        "summary": summary.model_dump(),
        "trades": [compact_trade(t) for t in recent],
    }
    return json.dumps(payload)


def summarize_for_chat(trades: Iterable[TradeLike], limit: int = 30) -> str:
    """Plain-text journal summary used as context for free-form questions."""
    snapshot = as_trades(trades)
    if not snapshot:
        return "No trades available."

    summary = summarize(snapshot)
    lines = [
        "Summary:",
        f"- Trades: {summary.trade_count}",
        f"- Win rate: {summary.win_rate:.1f}%",
        f"- Total PnL: {summary.total_pnl:.2f}",
        f"- Avg R:R: {summary.avg_rr:.2f}",
        "",
        f"Recent trades (max {limit}):",
    ]
    for trade in reversed(recent_trades(snapshot, limit)):
        rr = "-" if trade.rr is None else f"{trade.rr:.2f}"
        line = (
            f"* {trade.date.isoformat()} {trade.ticker} | {trade.pnl:.2f} | R:R {rr}"
            f" | {trade.entry_time or ''}->{trade.exit_time or ''}"
        )
        if trade.what_to_improve:
            line += f" | Note: {trade.what_to_improve[:60]}"
        lines.append(line)
    return "\n".join(lines)


def parse_insight(text: str) -> Insight:
    """Parse the coach's reply.

    Code fences are stripped. A reply that is not a JSON object becomes an
    Insight whose summary is the raw text.
    """
    cleaned = (text or "").strip()
    match = _FENCE_RE.match(cleaned)
    if match:
        cleaned = match.group(1)

    try:
        data = json.loads(cleaned)
    except json.JSONDecodeError:
        return Insight(summary=cleaned)
    if not isinstance(data, dict):
        return Insight(summary=cleaned)

    data = {_CAMEL_KEYS.get(k, k): v for k, v in data.items()}
    try:
        return Insight.model_validate(data)
    except ValidationError:
        return Insight(summary=str(data.get("summary") or cleaned))


class CoachAgent:
    """Agent that reviews a trader's journal.

    Builds the prompt from locally computed analytics so the model only has
    to interpret the numbers, not calculate them.
    """

    def __init__(self, model: Optional[str] = None):
        """Initialize the coach.

        Args:
            model: Optional model override.
        """
        self._insight_agent = self._create_agent("Trade Coach", COACH_INSTRUCTIONS, model)
        self._mentor_agent = self._create_agent("Trade Mentor", MENTOR_INSTRUCTIONS, model)

    @staticmethod
    def _create_agent(name: str, instructions: str, model: Optional[str]) -> Agent:
        return create_agent(name=name, instructions=instructions, model=model)

    def insights(
        self,
        trades: Iterable[TradeLike],
        ask: Optional[str] = None,
        window: int = DEFAULT_INSIGHT_WINDOW,
        rr_policy: RRPolicy = RRPolicy.DEFINED_ONLY,
    ) -> Insight:
        """Get structured insights on the most recent trades.

        Args:
            trades: Trade snapshot.
            ask: Optional specific question.
            window: Number of most recent trades to review.
            rr_policy: R:R averaging policy for the summary.

        Returns:
            Parsed insight.
        """
        prompt = build_insight_prompt(trades, ask=ask, window=window, rr_policy=rr_policy)
        return parse_insight(run_agent_sync(self._insight_agent, prompt))

    def chat(self, question: str, trades: Iterable[TradeLike]) -> str:
        """Answer a free-form question with the journal as context.

        Args:
            question: Trader's question.
            trades: Trade snapshot.

        Returns:
            Mentor's answer.
        """
        message = f"{summarize_for_chat(trades)}\n\nQuestion: {question}"
        return run_agent_sync(self._mentor_agent, message)
