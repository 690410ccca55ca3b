# ======================= DECKS ==========================

deck_schema = '''
    CREATE TABLE IF NOT EXISTS decks (
        deck_id INTEGER PRIMARY KEY AUTOINCREMENT,
        deck_name TEXT UNIQUE NOT NULL,
        daily_new_cap INTEGER NOT NULL DEFAULT 20,
        created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
    )
'''

# ======================= CARDS ==========================

card_schema = '''
    CREATE TABLE IF NOT EXISTS cards (
        card_id INTEGER PRIMARY KEY AUTOINCREMENT,
        deck_id INTEGER NOT NULL,

        front TEXT NOT NULL,
        back TEXT NOT NULL,

        created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
        updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,

        FOREIGN KEY (deck_id) REFERENCES decks(deck_id) ON DELETE CASCADE
    )
'''

# ======================= REVIEWS ========================
# One scheduler state per card. due_ts is epoch milliseconds.

review_schema = '''
    CREATE TABLE IF NOT EXISTS reviews (
        card_id INTEGER PRIMARY KEY,

        due_ts INTEGER NOT NULL,
        ivl_days INTEGER NOT NULL DEFAULT 0,
        ease REAL NOT NULL DEFAULT 2.5,
        reps INTEGER NOT NULL DEFAULT 0,
        lapses INTEGER NOT NULL DEFAULT 0,
        learning_stage INTEGER NOT NULL DEFAULT 0,
        difficulty REAL NOT NULL DEFAULT 0.5,
        suspended INTEGER NOT NULL DEFAULT 0,

        FOREIGN KEY (card_id) REFERENCES cards(card_id) ON DELETE CASCADE
    )
'''

# ======================= DAILY STATS ====================
# New cards introduced per deck per local day, for the daily cap.

daily_stats_schema = '''
    CREATE TABLE IF NOT EXISTS daily_stats (
        deck_id INTEGER NOT NULL,
        date_ymd TEXT NOT NULL,
        new_shown INTEGER NOT NULL DEFAULT 0,

        PRIMARY KEY (deck_id, date_ymd),
        FOREIGN KEY (deck_id) REFERENCES decks(deck_id) ON DELETE CASCADE
    )
'''

index_schemas = (
    'CREATE INDEX IF NOT EXISTS idx_cards_deck_id ON cards(deck_id)',
    'CREATE INDEX IF NOT EXISTS idx_reviews_due_ts ON reviews(due_ts)',
    'CREATE INDEX IF NOT EXISTS idx_reviews_learning_due ON reviews(learning_stage, due_ts)',
)
