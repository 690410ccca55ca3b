"""
Tests for the text/label builders in handlers/. No Telegram calls; only the main menu touches a temp DB.
"""
import database.database as db
from handlers.cards import preview_text
from handlers.review import available_decks, rating_labels, summary_text
from handlers.start import build_main_menu, menu_text
from handlers.stats import build_stats_text
from srs.config import DEFAULT_CONFIG
from srs.state import Rating, SchedulerState

T = 1_700_000_000_000


def _stats(**overrides):
    stats = {'total': 0, 'new': 0, 'learning': 0, 'review': 0, 'suspended': 0, 'due': 0}
    stats.update(overrides)
    return stats


class TestRatingLabels:
    def test_new_card(self):
        labels = rating_labels(SchedulerState(due_ts=T), T, DEFAULT_CONFIG)
        assert labels[Rating.AGAIN].endswith('Again 10m')
        assert labels[Rating.HARD].endswith('Hard 10m')
        assert labels[Rating.GOOD].endswith('Good 1h')
        assert labels[Rating.EASY].endswith('Easy 6d')

    def test_would_be_leech(self):
        state = SchedulerState(ivl_days=4, reps=3, lapses=7, due_ts=T)
        assert rating_labels(state, T, DEFAULT_CONFIG)[Rating.AGAIN].endswith('leech')


class TestAvailableDecks:
    def test_filters_decks_without_work(self):
        decks = [
            {'deck_id': 1, 'due_count': 0, 'new_available': 0},
            {'deck_id': 2, 'due_count': 3, 'new_available': 0},
            {'deck_id': 3, 'due_count': 0, 'new_available': 2},
        ]
        assert [d['deck_id'] for d in available_decks(decks)] == [2, 3]


class TestSummaryText:
    def test_counts(self):
        assert summary_text(5, 3, 0) == "\U0001f389 Done! 3/5 recalled"

    def test_mentions_leeches(self):
        text = summary_text(4, 1, 2)
        assert '2 leeches suspended' in text
        assert '/leeches' in text

    def test_nothing_reviewed(self):
        assert 'Nothing left' in summary_text(0, 0, 0)


class TestMenuText:
    def test_empty_collection(self):
        assert 'No cards yet' in menu_text(_stats(), 0)

    def test_caught_up(self):
        assert 'All caught up' in menu_text(_stats(total=4, review=4), 0)

    def test_due_and_new(self):
        text = menu_text(_stats(total=9, due=2, new=3), 3)
        assert '2 due · 3 new' in text

    def test_new_count_follows_daily_cap(self):
        text = menu_text(_stats(total=30, new=30), 5)
        assert '5 new' in text
        assert '30 new' not in text

    def test_cap_used_up_is_caught_up(self):
        assert 'All caught up' in menu_text(_stats(total=30, new=30), 0)


class TestMainMenu:
    def test_menu_agrees_with_review_picker(self, tmp_path, monkeypatch):
        monkeypatch.setattr(db, 'DB_PATH', str(tmp_path / "test.db"))
        db.init_db()
        deck_id = db.create_deck('Capped', daily_new_cap=2)
        for front in ('a', 'b', 'c', 'd'):
            db.save_card({'front': front, 'back': 'x'}, deck_id)

        text, _ = build_main_menu()
        picker = available_decks(db.get_deck_summaries())

        assert picker[0]['new_available'] == 2
        assert '2 new' in text
        assert '4 new' not in text


class TestStatsText:
    def test_sections(self):
        decks = [{'deck_name': 'A & B', 'card_count': 3, 'due_count': 1, 'new_available': 1, 'new_count': 2}]
        forecast = [{'day': '2026-02-18', 'count': 2}]
        text = build_stats_text(_stats(total=3, suspended=1, due=1), decks, forecast)
        assert 'Suspended: 1' in text
        assert 'A &amp; B' in text
        assert 'Feb 18  ·  2 cards' in text

    def test_empty_forecast(self):
        text = build_stats_text(_stats(), [], [{'day': '2026-02-18', 'count': 0}])
        assert 'Nothing coming up' in text
        assert 'No decks yet' in text


class TestPreviewText:
    def test_escapes_card_text(self):
        text = preview_text({'front': '<b>x</b>', 'back': 'y'}, 'Deck')
        assert '&lt;b&gt;x&lt;/b&gt;' in text
        assert 'Deck' in text

    def test_missing_deck(self):
        assert '—' in preview_text({'front': 'x', 'back': 'y'}, None)
