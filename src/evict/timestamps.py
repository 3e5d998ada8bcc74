import re
import time
from datetime import datetime
from typing import Optional, Text

# strftime '%F %Y at %T' spelled out: strptime knows no %F and refuses a
# repeated %Y, so parsing goes through _TIME_PATTERN instead.
TIME_FORMAT = '%Y-%m-%d %Y at %H:%M:%S'

_TIME_PATTERN = re.compile(
    r'(?P<date>\d{4}-\d{2}-\d{2}) (?P<year>\d{4}) at (?P<clock>\d{2}:\d{2}:\d{2})'
)

EPOCH = datetime(1970, 1, 1)

_last_reading = 0


def now() -> datetime:
    return datetime.now()


def format_time(moment: datetime) -> Text:
    return moment.strftime(TIME_FORMAT)


def parse_time(text: Text) -> Optional[datetime]:
    match = _TIME_PATTERN.fullmatch(text)
    if match is None:
        return None
    try:
        moment = datetime.strptime(
            f'{match["date"]} {match["clock"]}', '%Y-%m-%d %H:%M:%S',
        )
    except ValueError:
        return None
    if moment.year != int(match['year']):
        return None
    return moment


def generate_id() -> Text:
    """Seconds and nanoseconds of the wall clock, concatenated.

    Readings never repeat within a process: a reading that is not past the
    previous one is bumped by a nanosecond.
    """
    global _last_reading
    reading = max(time.time_ns(), _last_reading + 1)
    _last_reading = reading
    seconds, nanoseconds = divmod(reading, 1_000_000_000)
    return f'{seconds}{nanoseconds}'
