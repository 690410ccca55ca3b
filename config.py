import logging
import os
from dotenv import load_dotenv

from srs.config import SchedulerConfig

load_dotenv()

TG_BOT_TOKEN = os.getenv('TELEGRAM_BOT_TOKEN')
PROXY_URL = os.getenv('PROXY_URL')

# Personal bot: when set, every other Telegram user is ignored
OWNER_ID = int(os.getenv('HONE_OWNER_ID')) if os.getenv('HONE_OWNER_ID') else None

DB_PATH = os.getenv('HONE_DB_PATH') or os.path.join(os.path.dirname(os.path.abspath(__file__)), 'hone.db')

DAILY_NEW_CAP = int(os.getenv('HONE_DAILY_NEW_CAP', '20'))


def parse_steps(raw: str) -> list[float]:
    """'10, 60' -> [10.0, 60.0] (minutes)."""
    steps = [part.strip() for part in raw.split(',') if part.strip()]
    if not steps:
        raise ValueError(f"HONE_LEARNING_STEPS has no steps: {raw!r}")
    return [float(step) for step in steps]


SCHEDULER_CONFIG = SchedulerConfig.from_minutes(
    parse_steps(os.getenv('HONE_LEARNING_STEPS', '10,60')),
    leech_lapses=int(os.getenv('HONE_LEECH_LAPSES', '8')),
)

logging.basicConfig(
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    level=logging.INFO
)
