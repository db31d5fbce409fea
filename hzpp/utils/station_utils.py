import re
import unicodedata
from typing import List, Optional, Sequence

from hzpp.schemas.JourneySchemas import Station


def normalize_tokens(name: str) -> List[str]:
    # "Zagreb Glavni kol." -> ['zagreb', 'glavni', 'kol']
    decomposed = unicodedata.normalize('NFD', name.lower())
    stripped = ''.join(c for c in decomposed if not unicodedata.combining(c))
    stripped = re.sub(r'[.,]', '', stripped)
    return stripped.split()


def match_station_name(stations: Sequence[Station], name: str) -> Optional[Station]:
    """
    First station whose name has as many tokens as `name` and whose every token starts with
    the token of `name` at the same position. Abbreviations from timetables match full names.
    """
    if not name:
        return None
    input_tokens = normalize_tokens(name)
    if not input_tokens:
        return None
    for station in stations:
        station_tokens = normalize_tokens(station.name)
        if len(station_tokens) != len(input_tokens):
            continue
        if all(s.startswith(i) for s, i in zip(station_tokens, input_tokens)):
            return station
    return None


def find_stations_by_keyword(stations: Sequence[Station], keyword: str) -> List[Station]:
    """Stations containing every token of `keyword` as a prefix of one of their tokens"""
    tokens = normalize_tokens(keyword or '')
    if not tokens:
        return list(stations)
    result = []
    for station in stations:
        station_tokens = normalize_tokens(station.name)
        if all(any(s.startswith(t) for s in station_tokens) for t in tokens):
            result.append(station)
    return result
