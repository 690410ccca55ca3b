import logging
import sqlite3
from contextlib import contextmanager
from datetime import datetime, time, timedelta

from database.schema import deck_schema, card_schema, review_schema, daily_stats_schema, index_schemas
from config import DB_PATH, DAILY_NEW_CAP, SCHEDULER_CONFIG
from srs.scheduler import now_ms, schedule
from srs.state import SchedulerState


class MissingReviewState(LookupError):
    """A card id with no row in `reviews`."""

    def __init__(self, card_id):
        super().__init__(f"Missing review state for card {card_id}")
        self.card_id = card_id


# Phase predicates, same rules as srs.state.phase_of
_NEW = "r.suspended = 0 AND r.reps = 0 AND r.learning_stage = 0"
_LEARNING = "r.suspended = 0 AND r.learning_stage > 0"
_REVIEW = "r.suspended = 0 AND r.learning_stage = 0 AND r.reps > 0"
_DUE = "r.suspended = 0 AND r.due_ts <= :now AND (r.learning_stage > 0 OR r.reps > 0)"


# DECKS COMMANDS =============================================

def create_deck(deck_name, daily_new_cap=None):
    cap = DAILY_NEW_CAP if daily_new_cap is None else daily_new_cap
    with get_db() as conn:
        cursor = conn.cursor()
        cursor.execute(
            'INSERT INTO decks (deck_name, daily_new_cap) VALUES (?, ?)',
            (deck_name, cap)
        )
        logging.info(f"Created deck {cursor.lastrowid}: {deck_name!r}, cap={cap}")
        return cursor.lastrowid


def get_all_decks():
    with get_db() as conn:
        cursor = conn.cursor()
        cursor.execute('SELECT deck_id, deck_name FROM decks ORDER BY deck_name')
        rows = cursor.fetchall()
        return [{'id': row['deck_id'], 'name': row['deck_name']} for row in rows]


def get_deck_id(deck_name):
    with get_db() as conn:
        cursor = conn.cursor()
        cursor.execute("SELECT deck_id FROM decks WHERE deck_name = ?", (deck_name,))
        row = cursor.fetchone()
        if row:
            return row['deck_id']
        return None


def get_deck_name(deck_id):
    with get_db() as conn:
        cursor = conn.cursor()
        cursor.execute("SELECT deck_name FROM decks WHERE deck_id = ?", (deck_id,))
        row = cursor.fetchone()
        if row:
            return row['deck_name']
        return None


def delete_deck(deck_id):
    """Deletes the deck; cards, review states and daily stats go with it."""
    with get_db() as conn:
        cursor = conn.cursor()
        cursor.execute("DELETE FROM decks WHERE deck_id = ?", (deck_id,))
        logging.info(f"Deleted deck {deck_id}")
        return cursor.rowcount > 0


def get_deck_daily_new_cap(deck_id):
    with get_db() as conn:
        cursor = conn.cursor()
        cursor.execute("SELECT daily_new_cap FROM decks WHERE deck_id = ?", (deck_id,))
        row = cursor.fetchone()
        return row['daily_new_cap'] if row else DAILY_NEW_CAP


def set_daily_new_cap(deck_id, cap):
    if cap < 0:
        raise ValueError(f"daily_new_cap can't be negative, got {cap}")
    with get_db() as conn:
        cursor = conn.cursor()
        cursor.execute(
            "UPDATE decks SET daily_new_cap = ? WHERE deck_id = ?",
            (cap, deck_id)
        )
        logging.info(f"Deck {deck_id}: daily new cap set to {cap}")
        return cursor.rowcount > 0


def get_deck_summaries(now=None):
    """Per-deck counts for the picker and stats, one query."""
    if now is None:
        now = now_ms()
    with get_db() as conn:
        cursor = conn.cursor()
        cursor.execute(
            f"""SELECT d.deck_id, d.deck_name, d.daily_new_cap,
                       COUNT(c.card_id) AS card_count,
                       COALESCE(SUM(CASE WHEN {_DUE} THEN 1 ELSE 0 END), 0) AS due_count,
                       COALESCE(SUM(CASE WHEN {_NEW} THEN 1 ELSE 0 END), 0) AS new_count,
                       COALESCE(SUM(CASE WHEN {_REVIEW} AND r.due_ts <= :now THEN 1 ELSE 0 END), 0) AS review_count,
                       COALESCE(SUM(CASE WHEN {_REVIEW} AND r.due_ts > :now THEN 1 ELSE 0 END), 0) AS completed_count,
                       COALESCE(SUM(r.suspended), 0) AS suspended_count,
                       MIN(CASE WHEN r.suspended = 0 THEN r.due_ts END) AS next_due,
                       COALESCE(s.new_shown, 0) AS new_shown_today
                FROM decks d
                LEFT JOIN cards c ON c.deck_id = d.deck_id
                LEFT JOIN reviews r ON r.card_id = c.card_id
                LEFT JOIN daily_stats s ON s.deck_id = d.deck_id AND s.date_ymd = :today
                GROUP BY d.deck_id
                ORDER BY d.deck_name
            """,
            {'now': now, 'today': _day_key(now)}
        )
        summaries = [dict(row) for row in cursor.fetchall()]

    for deck in summaries:
        left = max(0, deck['daily_new_cap'] - deck['new_shown_today'])
        deck['new_available'] = min(deck['new_count'], left)
    return summaries


# CARDS COMMANDS =============================================

def save_card(card_dict, deck_id, now=None):
    """card_dict is {'front': ..., 'back': ...}. Returns the new card id."""
    if now is None:
        now = now_ms()
    with get_db() as conn:
        cursor = conn.cursor()
        cursor.execute(
            "INSERT INTO cards (front, back, deck_id) VALUES (?, ?, ?)",
            (card_dict['front'], card_dict['back'], deck_id)
        )
        card_id = cursor.lastrowid
        _attach_review_row(cursor, card_id, SchedulerState.new(now))
        logging.info(f"Saved card {card_id} to deck {deck_id}")
        return card_id


def get_card(card_id):
    """Card content joined with its review state, or None."""
    with get_db() as conn:
        cursor = conn.cursor()
        cursor.execute(
            """SELECT c.card_id, c.deck_id, c.front, c.back,
                      r.due_ts, r.ivl_days, r.ease, r.reps, r.lapses,
                      r.learning_stage, r.difficulty, r.suspended
               FROM cards c
               LEFT JOIN reviews r ON r.card_id = c.card_id
               WHERE c.card_id = ?
            """,
            (card_id,)
        )
        row = cursor.fetchone()
        return dict(row) if row else None


# REVIEW COMMANDS ============================================

def get_review_state(card_id):
    with get_db() as conn:
        return _read_review_state(conn.cursor(), card_id)


def update_review_state(card_id, state):
    with get_db() as conn:
        _write_review_state(conn.cursor(), card_id, state)


def rate_card(card_id, rating, now=None, scheduler_config=None):
    """
    Read the card's state, schedule it and write the result back in one
    IMMEDIATE transaction, so two ratings of the same card can't interleave.

    Returns (previous_state, next_state). InvalidRating propagates and
    nothing is written.
    """
    if now is None:
        now = now_ms()
    policy = scheduler_config or SCHEDULER_CONFIG

    with get_db() as conn:
        conn.execute('BEGIN IMMEDIATE')
        cursor = conn.cursor()
        previous = _read_review_state(cursor, card_id)
        result = schedule(previous, rating, now, policy)
        _write_review_state(cursor, card_id, result)

        # First graduation counts toward the deck's new-card cap
        if previous.reps == 0 and result.reps > 0:
            cursor.execute("SELECT deck_id FROM cards WHERE card_id = ?", (card_id,))
            _increment_new_shown(cursor, cursor.fetchone()['deck_id'], now)

    if result.suspended and not previous.suspended:
        logging.warning(f"Card {card_id} suspended as a leech after {result.lapses} lapses")
    return previous, result


def get_next_card(deck_id, now=None):
    """
    Pick the next card to show from a deck:
      1. learning/review cards that are due, oldest due first
      2. otherwise a new card, if today's new-card cap isn't used up
    Suspended cards are never shown. Returns a dict or None.
    """
    if now is None:
        now = now_ms()
    with get_db() as conn:
        cursor = conn.cursor()
        cursor.execute(
            f"""SELECT c.card_id, c.deck_id, c.front, c.back,
                       r.due_ts, r.ivl_days, r.ease, r.reps, r.lapses,
                       r.learning_stage, r.difficulty, r.suspended
                FROM cards c
                JOIN reviews r ON r.card_id = c.card_id
                WHERE c.deck_id = :deck_id AND {_DUE}
                ORDER BY r.due_ts, c.card_id
                LIMIT 1
            """,
            {'deck_id': deck_id, 'now': now}
        )
        row = cursor.fetchone()
        if row:
            return dict(row)

        cursor.execute("SELECT daily_new_cap FROM decks WHERE deck_id = ?", (deck_id,))
        deck = cursor.fetchone()
        if deck is None or _new_shown(cursor, deck_id, now) >= deck['daily_new_cap']:
            return None

        cursor.execute(
            f"""SELECT c.card_id, c.deck_id, c.front, c.back,
                       r.due_ts, r.ivl_days, r.ease, r.reps, r.lapses,
                       r.learning_stage, r.difficulty, r.suspended
                FROM cards c
                JOIN reviews r ON r.card_id = c.card_id
                WHERE c.deck_id = :deck_id AND {_NEW}
                ORDER BY c.card_id
                LIMIT 1
            """,
            {'deck_id': deck_id}
        )
        row = cursor.fetchone()
        return dict(row) if row else None


# DAILY CAP ==================================================

def get_new_shown_today(deck_id, now=None):
    if now is None:
        now = now_ms()
    with get_db() as conn:
        return _new_shown(conn.cursor(), deck_id, now)


def increment_new_shown_today(deck_id, now=None):
    if now is None:
        now = now_ms()
    with get_db() as conn:
        _increment_new_shown(conn.cursor(), deck_id, now)


# LEECHES ====================================================

def get_suspended_cards(deck_id=None):
    with get_db() as conn:
        cursor = conn.cursor()
        sql = """SELECT c.card_id, c.deck_id, c.front, r.lapses
                 FROM cards c
                 JOIN reviews r ON r.card_id = c.card_id
                 WHERE r.suspended = 1"""
        params = ()
        if deck_id is not None:
            sql += " AND c.deck_id = ?"
            params = (deck_id,)
        cursor.execute(sql + " ORDER BY c.card_id", params)
        return [dict(row) for row in cursor.fetchall()]


def unsuspend_card(card_id):
    """Manual way out of the leech state. Lapses are kept."""
    with get_db() as conn:
        cursor = conn.cursor()
        cursor.execute(
            "UPDATE reviews SET suspended = 0 WHERE card_id = ? AND suspended = 1",
            (card_id,)
        )
        if cursor.rowcount:
            logging.info(f"Unsuspended card {card_id}")
        return cursor.rowcount > 0


# STATS COMMANDS =============================================

def get_card_stats(now=None):
    if now is None:
        now = now_ms()
    with get_db() as conn:
        cursor = conn.cursor()
        cursor.execute(
            f"""SELECT
                   COUNT(*) AS total,
                   SUM({_NEW}) AS new,
                   SUM({_LEARNING}) AS learning,
                   SUM({_REVIEW}) AS review,
                   SUM(r.suspended = 1) AS suspended,
                   SUM({_DUE}) AS due
               FROM reviews r
            """,
            {'now': now}
        )
        row = cursor.fetchone()
        return {k: (row[k] or 0) for k in row.keys()}


def get_forecast(days=7, now=None):
    """Cards coming due per local day, today first. Overdue cards aren't counted."""
    if now is None:
        now = now_ms()
    today = datetime.fromtimestamp(now / 1000).date()
    day_keys = [(today + timedelta(d)).isoformat() for d in range(days)]
    # Local midnight after the last day shown
    window_end = int(datetime.combine(today + timedelta(days), time.min).timestamp() * 1000)

    with get_db() as conn:
        cursor = conn.cursor()
        cursor.execute(
            """SELECT date(due_ts / 1000, 'unixepoch', 'localtime') AS day, COUNT(*) AS cnt
               FROM reviews
               WHERE suspended = 0
                 AND due_ts > ?
                 AND due_ts < ?
               GROUP BY day
            """,
            (now, window_end)
        )
        rows = {row['day']: row['cnt'] for row in cursor.fetchall()}

    return [{'day': key, 'count': rows.get(key, 0)} for key in day_keys]


# PRIVATE HELPERS ============================================

def _day_key(now):
    return datetime.fromtimestamp(now / 1000).date().isoformat()


def _attach_review_row(cursor, card_id, state):
    cursor.execute(
        """INSERT OR IGNORE INTO reviews
               (card_id, due_ts, ivl_days, ease, reps, lapses, learning_stage, difficulty, suspended)
           VALUES (:card_id, :due_ts, :ivl_days, :ease, :reps, :lapses, :learning_stage, :difficulty, :suspended)
        """,
        {'card_id': card_id, **state.as_dict()}
    )


def _read_review_state(cursor, card_id):
    cursor.execute(
        """SELECT due_ts, ivl_days, ease, reps, lapses, learning_stage, difficulty, suspended
           FROM reviews WHERE card_id = ?
        """,
        (card_id,)
    )
    row = cursor.fetchone()
    if row is None:
        raise MissingReviewState(card_id)
    return SchedulerState.from_row(row)


def _write_review_state(cursor, card_id, state):
    cursor.execute(
        """UPDATE reviews
           SET due_ts = :due_ts, ivl_days = :ivl_days, ease = :ease,
               reps = :reps, lapses = :lapses, learning_stage = :learning_stage,
               difficulty = :difficulty, suspended = :suspended
           WHERE card_id = :card_id
        """,
        {'card_id': card_id, **state.as_dict()}
    )
    if cursor.rowcount == 0:
        raise MissingReviewState(card_id)
    cursor.execute("UPDATE cards SET updated_at = datetime('now') WHERE card_id = ?", (card_id,))


def _new_shown(cursor, deck_id, now):
    cursor.execute(
        "SELECT new_shown FROM daily_stats WHERE deck_id = ? AND date_ymd = ?",
        (deck_id, _day_key(now))
    )
    row = cursor.fetchone()
    return row['new_shown'] if row else 0


def _increment_new_shown(cursor, deck_id, now):
    cursor.execute(
        """INSERT INTO daily_stats (deck_id, date_ymd, new_shown)
           VALUES (?, ?, 1)
           ON CONFLICT(deck_id, date_ymd) DO UPDATE SET new_shown = new_shown + 1
        """,
        (deck_id, _day_key(now))
    )


# DB CONNECTION ==============================================

@contextmanager
def get_db():
    conn = sqlite3.connect(DB_PATH)
    conn.row_factory = sqlite3.Row
    conn.execute('PRAGMA foreign_keys = ON')

    try:
        yield conn
        conn.commit()
    except Exception:
        conn.rollback()
        raise
    finally:
        conn.close()


def init_db():
    with get_db() as conn:
        conn.execute(deck_schema)
        conn.execute(card_schema)
        conn.execute(review_schema)
        conn.execute(daily_stats_schema)
        for statement in index_schemas:
            conn.execute(statement)
