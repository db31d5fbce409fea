import asyncio
import logging
import re
from datetime import datetime, timedelta
from typing import Awaitable, Callable, Dict, List, Optional, Sequence

from hzpp import config
from hzpp.schemas.Constants import TrainStateEnum, TrainStatusEnum
from hzpp.schemas.JourneySchemas import Station, TrainInfo, TrainDetails, JourneyRouteSchedule, \
    ExtendedJourneyRouteSchedule
from hzpp.utils import http_utils
from hzpp.utils.exceptions import PreconditionException
from hzpp.utils.html_utils import parse_html, first_text, text_of
from hzpp.utils.station_utils import match_station_name
from hzpp.utils.time_utils import get_now, parse_live_timestamp
from hzpp.utils.validation_utils import parse_or_raise

logger = logging.getLogger(__name__)

LIVE_ERROR_MARKERS = http_utils.ERROR_MARKERS + ('ne mozemo dati trazenu informaciju',)

# checked in order, the page may mention more than one
STATE_KEYWORDS = (
    ('završio', TrainStateEnum.FINISHED),
    ('odlazak', TrainStateEnum.DEPARTURE),
    ('dolazak', TrainStateEnum.ARRIVAL),
    ('formiran', TrainStateEnum.FORMED),
)
STATUS_KEYWORDS = (
    ('redovit', TrainStatusEnum.ON_TIME),
    ('polazak', TrainStatusEnum.WAITING_DEPARTURE),
    ('kasni', TrainStatusEnum.DELAYED),
)
LATE_PATTERN = re.compile(r'kasni\s+(\d+)\s+min')
AT_TIME_PATTERN = re.compile(r'(\d{2}\.\d{2}\.\d{2})\s+(\d{2}:\d{2})')


def classify_state(state_text: str) -> TrainStateEnum:
    state_text = state_text.lower()
    for keyword, state in STATE_KEYWORDS:
        if keyword in state_text:
            return state
    return TrainStateEnum.UNKNOWN


def classify_status(status_line: str) -> tuple:
    """(status, late minutes), minutes only for a delayed train"""
    status_line = status_line.lower()
    for keyword, status in STATUS_KEYWORDS:
        if keyword in status_line:
            if status != TrainStatusEnum.DELAYED:
                return status, None
            matched = LATE_PATTERN.search(status_line)
            return status, int(matched.group(1)) if matched else None
    return TrainStatusEnum.UNKNOWN, None


def find_font_text(tree, keywords) -> str:
    """Text of the first <font> mentioning any of the keywords, case-insensitive"""
    for font in tree.xpath("//font"):
        text = text_of(font)
        if any(x in text.lower() for x in keywords):
            return text
    return ""


def parse_train_info_page(html: str, train_number: str, stations: Sequence[Station],
                          now: datetime = None) -> TrainInfo:
    tree = parse_html(html)

    current_station_name = first_text(tree, '//i[contains(., "Kolodvor")]/following-sibling::*[1][self::strong]')
    is_replacement_bus = len(tree.xpath('//i[contains(., "autobus")]')) > 0

    status_line = find_font_text(tree, [x for x, _ in STATUS_KEYWORDS])
    state_text = find_font_text(tree, [x for x, _ in STATE_KEYWORDS])

    status, late_minutes = classify_status(status_line)
    at_time = None
    if matched := AT_TIME_PATTERN.search(state_text):
        at_time = parse_live_timestamp(f'{matched.group(1)} {matched.group(2)}')

    data = {
        'train_number': train_number,
        'current_station': match_station_name(stations, current_station_name) if current_station_name else None,
        'state': classify_state(state_text),
        'status': status,
        'at_time': at_time or now or get_now(),
        'late_minutes': late_minutes,
        'is_replacement_bus': is_replacement_bus,
    }
    return parse_or_raise(TrainInfo, data, 'train info')


async def get_train_info(train_number: str, auth_token: str, stations: Sequence[Station]) -> TrainInfo:
    if not auth_token:
        raise PreconditionException('Auth token is required to fetch train info.')
    resp = await http_utils.fetch(config.TRAIN_COMPOSITION_URL, params={'trainId': train_number},
                                  headers={'Authorization': f'Bearer {auth_token}'},
                                  error_markers=LIVE_ERROR_MARKERS,
                                  invalid_message='Invalid train ID or authToken.')
    return parse_train_info_page(resp.text, train_number, stations)


def should_fetch_train_info(train: TrainDetails, now: datetime, minute_deviation: int) -> bool:
    """Live info is worth fetching for a train that has not arrived and departs within the window"""
    if train.should_arrive_at and train.should_arrive_at < now:
        return False
    if minute_deviation == -1:
        return True
    if not train.should_depart_at or train.should_depart_at < now:
        return False
    return abs(train.should_depart_at - now) <= timedelta(minutes=minute_deviation)


async def merge_train_info(schedule: JourneyRouteSchedule, fetcher: Callable[[str], Awaitable[TrainInfo]],
                           minute_deviation: int, now: datetime = None) -> ExtendedJourneyRouteSchedule:
    """
    Fetch live info for every distinct train number that passes the time window, in parallel, and
    attach it to every segment with that number. A failed fetch leaves `train_info` empty for its
    segments only.
    """
    now = now or get_now()

    async def _fetch(_train_number: str) -> Optional[TrainInfo]:
        try:
            return await fetcher(_train_number)
        except Exception as e:
            logger.warning(f'Get train info failed, train:{_train_number}', exc_info=e)
            return None

    train_numbers: List[str] = []
    for train in schedule.trains:
        if train.train_number not in train_numbers and should_fetch_train_info(train, now, minute_deviation):
            train_numbers.append(train.train_number)

    tasks = [asyncio.create_task(_fetch(x)) for x in train_numbers]
    infos = await asyncio.gather(*tasks)
    result: Dict[str, Optional[TrainInfo]] = dict(zip(train_numbers, infos))

    data = schedule.model_dump()
    for train in data['trains']:
        train['train_info'] = result.get(train['train_number'])
    return ExtendedJourneyRouteSchedule.model_validate(data)
