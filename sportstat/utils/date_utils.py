"""rating period strings"""
import re

PERIOD_PATTERN = re.compile(r'(?P<count>\d+)(?P<unit>[wdhms])', re.IGNORECASE)
UNIT_SECONDS = {'w': 604800, 'd': 86400, 'h': 3600, 'm': 60, 's': 1}


def get_duration(duration_str: str) -> int:
    """
    Number of seconds in a rating period written as a count and a unit letter, e.g. '1W', '7d' or '24H'.
    Units are weeks, days, hours, minutes and seconds, in either case.
    """
    match = PERIOD_PATTERN.fullmatch(duration_str)
    if match is None:
        raise ValueError(f'rating period must look like 7D or 1W, got {duration_str!r}')
    count = int(match['count'])
    if count <= 0:
        raise ValueError(f'rating period must be positive, got {duration_str!r}')
    return count * UNIT_SECONDS[match['unit'].lower()]
