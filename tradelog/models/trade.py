"""Trade data model."""

import logging
import uuid
from datetime import date as date_type
from datetime import datetime
from typing import Any, Mapping, Optional

from pydantic import BaseModel, Field, ValidationError, ValidationInfo, field_validator

from tradelog.normalize import to_finite_number, to_optional_number

logger = logging.getLogger(__name__)


# Fields a user may change through an edit. Identity and ownership are not.
EDITABLE_FIELDS = (
    "date",
    "ticker",
    "entry_time",
    "exit_time",
    "pnl",
    "final_rr",
    "amount_risked",
    "confluences",
    "done_right",
    "done_wrong",
    "what_to_improve",
    "emotions",
    "entry_chart",
    "htf_chart",
)

# Validation context for records already in the journal (imports, stored rows).
# An empty ticker is kept there; explicit construction still rejects it.
JOURNAL_CONTEXT = {"allow_blank_ticker": True}

# Alternate spellings accepted from imported records and API payloads.
_RECORD_ALIASES = {
    "entryTime": "entry_time",
    "exitTime": "exit_time",
    "finalRR": "final_rr",
    "amountRisked": "amount_risked",
    "doneRight": "done_right",
    "doneWrong": "done_wrong",
    "whatToImprove": "what_to_improve",
    "what_to_do": "what_to_improve",
    "note": "what_to_improve",
    "entryChart": "entry_chart",
    "htfChart": "htf_chart",
    "userId": "user_id",
    "createdAt": "created_at",
}


class Trade(BaseModel):
    """Represents one journaled trade."""

    id: str = Field(
        default_factory=lambda: uuid.uuid4().hex, description="Opaque trade ID"
    )
    user_id: Optional[str] = Field(default=None, description="Owning user ID")
    date: date_type = Field(..., description="Day the trade is attributed to")
    ticker: str = Field(..., description="Instrument symbol")
    entry_time: Optional[str] = Field(default=None, description="Entry time HH:MM")
    exit_time: Optional[str] = Field(default=None, description="Exit time HH:MM")
    pnl: float = Field(default=0.0, description="Realized P&L")
    final_rr: Optional[float] = Field(default=None, description="Realized reward:risk")
    amount_risked: Optional[float] = Field(default=None, description="Amount risked")
    confluences: Optional[str] = None
    done_right: Optional[str] = None
    done_wrong: Optional[str] = None
    what_to_improve: Optional[str] = None
    emotions: Optional[str] = None
    entry_chart: Optional[str] = Field(default=None, description="Entry chart reference")
    htf_chart: Optional[str] = Field(default=None, description="Higher-timeframe chart reference")
    created_at: datetime = Field(default_factory=datetime.now)

    model_config = {"frozen": True}

    @field_validator("ticker", mode="before")
    @classmethod
    def _normalize_ticker(cls, value: Any) -> str:
        return str(value or "").strip().upper()

    @field_validator("ticker")
    @classmethod
    def _require_ticker(cls, value: str, info: ValidationInfo) -> str:
        if not value and not (info.context or {}).get("allow_blank_ticker"):
            raise ValueError("ticker must not be empty")
        return value

    @field_validator("entry_time", "exit_time", mode="before")
    @classmethod
    def _blank_time_is_none(cls, value: Any) -> Optional[str]:
        if value is None:
            return None
        value = str(value).strip()
        return value or None

    @field_validator("pnl", mode="before")
    @classmethod
    def _normalize_pnl(cls, value: Any) -> float:
        return to_finite_number(value)

    @field_validator("final_rr", mode="before")
    @classmethod
    def _normalize_final_rr(cls, value: Any) -> Optional[float]:
        return to_optional_number(value)

    @field_validator("amount_risked", mode="before")
    @classmethod
    def _normalize_amount_risked(cls, value: Any) -> Optional[float]:
        amount = to_optional_number(value)
        if amount is None or amount <= 0:
            return None
        return amount

    @property
    def rr(self) -> Optional[float]:
        """Reward:risk, derived from pnl and amount risked when not logged."""
        if self.final_rr is not None:
            return self.final_rr
        if self.amount_risked:
            return self.pnl / self.amount_risked
        return None

    @classmethod
    def from_record(cls, record: Mapping[str, Any]) -> Optional["Trade"]:
        """Build a trade from a loosely-typed record.

        Accepts camelCase keys and the legacy ``what_to_do``/``note`` names.
        Empty strings are dropped so field defaults apply.

        Returns:
            The trade, or None when the record has no usable date. A missing
            ticker is kept as an empty string.
        """
        data: dict[str, Any] = {}
        for key, value in record.items():
            name = _RECORD_ALIASES.get(key, key)
            if name not in cls.model_fields:
                continue
            if isinstance(value, str) and not value.strip():
                continue
            if name in data and data[name] is not None:
                continue
            data[name] = value
        if isinstance(data.get("date"), str):
            # Accept full timestamps, keep the calendar day.
            data["date"] = data["date"].strip()[:10]
        data.setdefault("ticker", "")
        try:
            return cls.model_validate(data, context=JOURNAL_CONTEXT)
        except ValidationError as e:
            logger.debug("Skipping malformed trade record %r: %s", record, e)
            return None

    def with_changes(self, patch: Mapping[str, Any]) -> "Trade":
        """Return a copy with editable fields replaced from ``patch``.

        The copy is re-validated, so normalization rules apply to the new
        values. ``id``, ``user_id`` and ``created_at`` are preserved.
        """
        data = self.model_dump()
        for key, value in patch.items():
            name = _RECORD_ALIASES.get(key, key)
            if name in EDITABLE_FIELDS:
                data[name] = value
        context = JOURNAL_CONTEXT if data["ticker"] == self.ticker else None
        return Trade.model_validate(data, context=context)

    def to_record(self) -> dict[str, Any]:
        """Serialize to a JSON-compatible dict."""
        return self.model_dump(mode="json")
