"""SQLite data store for tradelog."""

import logging
import sqlite3
from datetime import date
from pathlib import Path
from typing import Any, Callable, Iterable, Mapping, Optional

from tradelog.models import Goal, Profile, Trade
from tradelog.models.goal import clamp_progress
from tradelog.models.profile import SUBSCRIPTION_STATUSES
from tradelog.models.trade import JOURNAL_CONTEXT

logger = logging.getLogger(__name__)

# Called with (event, user_id) after the user's trade set changed.
ChangeCallback = Callable[[str, str], None]

TRADE_COLUMNS = (
    "id",
    "user_id",
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
    "created_at",
)

_COLUMN_LIST = ", ".join(TRADE_COLUMNS)
_PLACEHOLDERS = ", ".join("?" for _ in TRADE_COLUMNS)
_EDITABLE_COLUMNS = [c for c in TRADE_COLUMNS if c not in ("id", "user_id", "created_at")]
_ASSIGNMENTS = ", ".join(f"{c} = ?" for c in _EDITABLE_COLUMNS)
_RESTORE_ASSIGNMENTS = ", ".join(f"{c} = excluded.{c}" for c in _EDITABLE_COLUMNS)


class TradeNotFoundError(LookupError):
    """Raised when a trade ID does not exist."""


class GoalNotFoundError(LookupError):
    """Raised when a goal ID does not exist."""


class DataStore:
    """SQLite-based data store for tradelog."""

    REQUIRED_TABLES = [
        "trades",
        "goals",
        "profiles",
    ]

    def __init__(self, db_path: Path):
        """Initialize the data store.

        Args:
            db_path: Path to the SQLite database file.
        """
        self.db_path = Path(db_path)
        self._subscribers: dict[str, list[ChangeCallback]] = {}
        self._ensure_db_dir()
        self._init_schema()

    def _ensure_db_dir(self) -> None:
        """Ensure the database directory exists."""
        self.db_path.parent.mkdir(parents=True, exist_ok=True)

    def _get_connection(self) -> sqlite3.Connection:
        """Get a database connection."""
        conn = sqlite3.connect(self.db_path)
        conn.row_factory = sqlite3.Row
        return conn

    def _init_schema(self) -> None:
        """Initialize database schema on first run."""
        conn = self._get_connection()
        try:
            cursor = conn.cursor()

            # Trades table
            cursor.execute("""
                CREATE TABLE IF NOT EXISTS trades (
                    id TEXT PRIMARY KEY,
                    user_id TEXT NOT NULL,
                    date TEXT NOT NULL,
                    ticker TEXT NOT NULL,
                    entry_time TEXT,
                    exit_time TEXT,
                    pnl REAL NOT NULL DEFAULT 0,
                    final_rr REAL,
                    amount_risked REAL,
                    confluences TEXT,
                    done_right TEXT,
                    done_wrong TEXT,
                    what_to_improve TEXT,
                    emotions TEXT,
                    entry_chart TEXT,
                    htf_chart TEXT,
                    created_at TEXT NOT NULL
                )
            """)
            cursor.execute(
                "CREATE INDEX IF NOT EXISTS idx_trades_user_date ON trades (user_id, date)"
            )

            # Goals table
            cursor.execute("""
                CREATE TABLE IF NOT EXISTS goals (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    user_id TEXT NOT NULL,
                    title TEXT NOT NULL,
                    description TEXT,
                    progress INTEGER NOT NULL DEFAULT 0,
                    deadline TEXT,
                    completed INTEGER NOT NULL DEFAULT 0
                )
            """)

            # Profiles table
            cursor.execute("""
                CREATE TABLE IF NOT EXISTS profiles (
                    user_id TEXT PRIMARY KEY,
                    email TEXT,
                    subscription_status TEXT NOT NULL DEFAULT 'inactive',
                    subscription_id TEXT,
                    current_period_end TEXT
                )
            """)

            conn.commit()
        finally:
            conn.close()

    def get_tables(self) -> list[str]:
        """Get list of all tables in the database."""
        conn = self._get_connection()
        try:
            cursor = conn.cursor()
            cursor.execute(
                "SELECT name FROM sqlite_master WHERE type='table' AND name NOT LIKE 'sqlite_%'"
            )
            return [row["name"] for row in cursor.fetchall()]
        finally:
            conn.close()

    # ==================== Change notifications ====================

    def subscribe(self, user_id: str, callback: ChangeCallback) -> Callable[[], None]:
        """Register a callback fired whenever the user's trades change.

        Args:
            user_id: User whose trade set to watch.
            callback: Called with ``(event, user_id)`` where event is one of
                ``created``, ``updated``, ``deleted`` or ``restored``.

        Returns:
            A function that removes the subscription.
        """
        self._subscribers.setdefault(user_id, []).append(callback)

        def unsubscribe() -> None:
            callbacks = self._subscribers.get(user_id, [])
            if callback in callbacks:
                callbacks.remove(callback)

        return unsubscribe

    def _notify(self, event: str, user_id: str) -> None:
        for callback in list(self._subscribers.get(user_id, [])):
            try:
                callback(event, user_id)
            except Exception:
                logger.exception("Trade change subscriber failed for user %s", user_id)

    # ==================== Trades ====================

    @staticmethod
    def _trade_params(trade: Trade) -> tuple:
        record = trade.model_dump()
        record["date"] = trade.date.isoformat()
        record["created_at"] = trade.created_at.isoformat()
        return tuple(record[column] for column in TRADE_COLUMNS)

    @staticmethod
    def _row_to_trade(row: sqlite3.Row) -> Trade:
        return Trade.model_validate(dict(row), context=JOURNAL_CONTEXT)

    def create_trade(self, trade: Trade, user_id: Optional[str] = None) -> Trade:
        """Store a new trade.

        Args:
            trade: Trade to store.
            user_id: Owner. Falls back to ``trade.user_id``.

        Returns:
            The stored trade, with its owner set.

        Raises:
            ValueError: If no owner is known.
        """
        owner = user_id or trade.user_id
        if not owner:
            raise ValueError("A trade must belong to a user")
        stored = trade.model_copy(update={"user_id": owner})

        conn = self._get_connection()
        try:
            cursor = conn.cursor()
            cursor.execute(
                f"""
                INSERT INTO trades ({_COLUMN_LIST})
                VALUES ({_PLACEHOLDERS})
                """,
                self._trade_params(stored),
            )
            conn.commit()
        finally:
            conn.close()

        logger.debug("Created trade %s for user %s", stored.id, owner)
        self._notify("created", owner)
        return stored

    def get_trade(self, trade_id: str) -> Optional[Trade]:
        """Get a trade by ID.

        Args:
            trade_id: Trade ID.

        Returns:
            Trade if found, None otherwise.
        """
        conn = self._get_connection()
        try:
            cursor = conn.cursor()
            cursor.execute(
                f"SELECT {_COLUMN_LIST} FROM trades WHERE id = ?",
                (trade_id,),
            )
            row = cursor.fetchone()
            return self._row_to_trade(row) if row else None
        finally:
            conn.close()

    def list_trades(
        self,
        user_id: str,
        trade_date: Optional[date] = None,
        month: Optional[str] = None,
    ) -> list[Trade]:
        """Get a user's trades.

        Args:
            user_id: Owner of the trades.
            trade_date: Optional single-day filter.
            month: Optional ``YYYY-MM`` filter.

        Returns:
            Trades ordered by date, then creation.
        """
        query = f"SELECT {_COLUMN_LIST} FROM trades WHERE user_id = ?"
        params: list[Any] = [user_id]
        if trade_date:
            query += " AND date = ?"
            params.append(trade_date.isoformat())
        if month:
            query += " AND date LIKE ?"
            params.append(f"{month}-%")
        query += " ORDER BY date, created_at, rowid"

        conn = self._get_connection()
        try:
            cursor = conn.cursor()
            cursor.execute(query, params)
            return [self._row_to_trade(row) for row in cursor.fetchall()]
        finally:
            conn.close()

    def update_trade(self, trade_id: str, patch: Mapping[str, Any]) -> Trade:
        """Edit a trade.

        Args:
            trade_id: Trade ID.
            patch: New values for editable fields. Values are re-normalized.

        Returns:
            The updated trade.

        Raises:
            TradeNotFoundError: If the trade does not exist.
        """
        existing = self.get_trade(trade_id)
        if existing is None:
            raise TradeNotFoundError(trade_id)
        updated = existing.with_changes(patch)

        params = dict(zip(TRADE_COLUMNS, self._trade_params(updated)))

        conn = self._get_connection()
        try:
            cursor = conn.cursor()
            cursor.execute(
                f"UPDATE trades SET {_ASSIGNMENTS} WHERE id = ?",
                [params[c] for c in _EDITABLE_COLUMNS] + [trade_id],
            )
            conn.commit()
        finally:
            conn.close()

        logger.debug("Updated trade %s", trade_id)
        self._notify("updated", updated.user_id)
        return updated

    def delete_trade(self, trade_id: str) -> None:
        """Delete a trade.

        Args:
            trade_id: ID of the trade to delete.

        Raises:
            TradeNotFoundError: If the trade does not exist.
        """
        existing = self.get_trade(trade_id)
        if existing is None:
            raise TradeNotFoundError(trade_id)

        conn = self._get_connection()
        try:
            cursor = conn.cursor()
            cursor.execute("DELETE FROM trades WHERE id = ?", (trade_id,))
            conn.commit()
        finally:
            conn.close()

        logger.debug("Deleted trade %s", trade_id)
        self._notify("deleted", existing.user_id)

    def upsert_trades(self, user_id: str, trades: Iterable[Trade]) -> int:
        """Insert or replace trades, as when restoring a backup.

        Args:
            user_id: Owner assigned to every trade.
            trades: Trades to store. Existing IDs owned by ``user_id`` are
                overwritten; IDs owned by another user are left untouched.

        Returns:
            Number of trades written.
        """
        rows = [
            self._trade_params(trade.model_copy(update={"user_id": user_id}))
            for trade in trades
        ]
        if not rows:
            return 0

        conn = self._get_connection()
        try:
            cursor = conn.cursor()
            cursor.executemany(
                f"""
                INSERT INTO trades ({_COLUMN_LIST})
                VALUES ({_PLACEHOLDERS})
                ON CONFLICT(id) DO UPDATE SET {_RESTORE_ASSIGNMENTS}
                WHERE trades.user_id = excluded.user_id
                """,
                rows,
            )
            written = cursor.rowcount
            conn.commit()
        finally:
            conn.close()

        if written < len(rows):
            logger.warning(
                "Skipped %d trades whose IDs belong to another user",
                len(rows) - written,
            )
        logger.info("Restored %d trades for user %s", written, user_id)
        if written:
            self._notify("restored", user_id)
        return written

    # ==================== Goals ====================

    @staticmethod
    def _row_to_goal(row: sqlite3.Row) -> Goal:
        return Goal(
            id=row["id"],
            user_id=row["user_id"],
            title=row["title"],
            description=row["description"],
            progress=row["progress"],
            deadline=date.fromisoformat(row["deadline"]) if row["deadline"] else None,
        )

    def add_goal(self, goal: Goal, user_id: Optional[str] = None) -> Goal:
        """Save a new goal.

        Args:
            goal: Goal to save.
            user_id: Owner. Falls back to ``goal.user_id``.

        Returns:
            The stored goal with its database ID.
        """
        owner = user_id or goal.user_id
        if not owner:
            raise ValueError("A goal must belong to a user")

        conn = self._get_connection()
        try:
            cursor = conn.cursor()
            cursor.execute(
                """
                INSERT INTO goals (user_id, title, description, progress, deadline, completed)
                VALUES (?, ?, ?, ?, ?, ?)
                """,
                (
                    owner,
                    goal.title,
                    goal.description,
                    goal.progress,
                    goal.deadline.isoformat() if goal.deadline else None,
                    1 if goal.completed else 0,
                ),
            )
            conn.commit()
            return goal.model_copy(update={"id": cursor.lastrowid, "user_id": owner})
        finally:
            conn.close()

    def list_goals(self, user_id: str, sort_by: str = "deadline") -> list[Goal]:
        """Get a user's goals.

        Args:
            user_id: Owner of the goals.
            sort_by: ``deadline`` (goals without one last) or ``progress``.

        Returns:
            List of goals, ascending by the sort key.
        """
        order = "progress, id" if sort_by == "progress" else "deadline IS NULL, deadline, id"
        conn = self._get_connection()
        try:
            cursor = conn.cursor()
            cursor.execute(
                f"""
                SELECT id, user_id, title, description, progress, deadline
                FROM goals
                WHERE user_id = ?
                ORDER BY {order}
                """,
                (user_id,),
            )
            return [self._row_to_goal(row) for row in cursor.fetchall()]
        finally:
            conn.close()

    def update_goal_progress(self, goal_id: int, progress: Any) -> Goal:
        """Set a goal's progress; 100 or more marks it completed.

        Args:
            goal_id: Goal ID.
            progress: New progress, clamped to 0..100.

        Returns:
            The updated goal.

        Raises:
            GoalNotFoundError: If the goal does not exist.
        """
        value = clamp_progress(progress)
        conn = self._get_connection()
        try:
            cursor = conn.cursor()
            cursor.execute(
                "UPDATE goals SET progress = ?, completed = ? WHERE id = ?",
                (value, 1 if value >= 100 else 0, goal_id),
            )
            if cursor.rowcount == 0:
                raise GoalNotFoundError(goal_id)
            conn.commit()
            cursor.execute(
                "SELECT id, user_id, title, description, progress, deadline FROM goals WHERE id = ?",
                (goal_id,),
            )
            return self._row_to_goal(cursor.fetchone())
        finally:
            conn.close()

    def delete_goal(self, goal_id: int) -> None:
        """Delete a goal.

        Args:
            goal_id: ID of the goal to delete.

        Raises:
            GoalNotFoundError: If the goal does not exist.
        """
        conn = self._get_connection()
        try:
            cursor = conn.cursor()
            cursor.execute("DELETE FROM goals WHERE id = ?", (goal_id,))
            if cursor.rowcount == 0:
                raise GoalNotFoundError(goal_id)
            conn.commit()
        finally:
            conn.close()

    # ==================== Profiles ====================

    def ensure_profile(self, user_id: str, email: Optional[str] = None) -> Profile:
        """Create the user's profile if missing; never resets its status.

        Args:
            user_id: User ID.
            email: Optional email to record.

        Returns:
            The user's profile.
        """
        conn = self._get_connection()
        try:
            cursor = conn.cursor()
            cursor.execute(
                "INSERT OR IGNORE INTO profiles (user_id, email) VALUES (?, ?)",
                (user_id, email),
            )
            if email:
                cursor.execute(
                    "UPDATE profiles SET email = ? WHERE user_id = ?",
                    (email, user_id),
                )
            conn.commit()
        finally:
            conn.close()
        return self.get_profile(user_id)

    def get_profile(self, user_id: str) -> Optional[Profile]:
        """Get a user's profile.

        Args:
            user_id: User ID.

        Returns:
            Profile if found, None otherwise.
        """
        conn = self._get_connection()
        try:
            cursor = conn.cursor()
            cursor.execute(
                """
                SELECT user_id, email, subscription_status, subscription_id, current_period_end
                FROM profiles
                WHERE user_id = ?
                """,
                (user_id,),
            )
            row = cursor.fetchone()
            if row:
                return Profile(
                    user_id=row["user_id"],
                    email=row["email"],
                    subscription_status=row["subscription_status"],
                    subscription_id=row["subscription_id"],
                    current_period_end=(
                        date.fromisoformat(row["current_period_end"])
                        if row["current_period_end"]
                        else None
                    ),
                )
            return None
        finally:
            conn.close()

    def set_subscription(
        self,
        user_id: str,
        status: str,
        subscription_id: Optional[str] = None,
        current_period_end: Optional[date] = None,
    ) -> Profile:
        """Record a user's subscription state.

        Args:
            user_id: User ID.
            status: One of ``active``, ``inactive`` or ``cancelled``.
            subscription_id: Optional billing subscription ID.
            current_period_end: Optional last day of the paid period.

        Returns:
            The updated profile.

        Raises:
            ValueError: If ``status`` is not a known status.
        """
        if status not in SUBSCRIPTION_STATUSES:
            raise ValueError(f"Unknown subscription status '{status}'")
        self.ensure_profile(user_id)

        conn = self._get_connection()
        try:
            cursor = conn.cursor()
            cursor.execute(
                """
                UPDATE profiles
                SET subscription_status = ?, subscription_id = ?, current_period_end = ?
                WHERE user_id = ?
                """,
                (
                    status,
                    subscription_id,
                    current_period_end.isoformat() if current_period_end else None,
                    user_id,
                ),
            )
            conn.commit()
        finally:
            conn.close()

        logger.info("Subscription for user %s set to %s", user_id, status)
        return self.get_profile(user_id)

    def is_subscription_active(self, user_id: str, today: Optional[date] = None) -> bool:
        """Entitlement check: does the user have an active subscription?"""
        profile = self.get_profile(user_id)
        return profile is not None and profile.is_active(today)

    # ==================== Stats ====================

    def get_stats(self) -> dict:
        """Get database statistics.

        Returns:
            Dictionary with table record counts.
        """
        conn = self._get_connection()
        try:
            cursor = conn.cursor()
            stats = {}
            for table in self.REQUIRED_TABLES:
                cursor.execute(f"SELECT COUNT(*) as count FROM {table}")
                stats[table] = cursor.fetchone()["count"]
            return stats
        finally:
            conn.close()
