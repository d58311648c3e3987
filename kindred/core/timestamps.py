import time
from datetime import datetime


def current_millis() -> int:
    return int(time.time() * 1000)


def format_date_added(moment: datetime | None = None) -> str:
    """Render a creation date the way the record tables show it, e.g. ``Oct 17, 2026``."""
    moment = moment or datetime.now()
    return f'{moment:%b} {moment.day}, {moment.year}'
