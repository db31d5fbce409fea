import logging
from datetime import datetime
from typing import List

from tabulate import tabulate

from hzpp.schemas.Constants import CompositionTypeEnum, TripTypeEnum, TrainStatusEnum, TrainStateEnum
from hzpp.schemas.JourneySchemas import JourneyTimetable, TrainDetails, ExtendedJourney, Station
from hzpp.service.hzpp_client import HzppClient
from hzpp.service.journey_service import validate_journey
from hzpp.utils.exceptions import InputException
from hzpp.utils.segment_utils import calculate_journey_percentage
from hzpp.utils.time_utils import get_now

logger = logging.getLogger(__name__)


async def resolve_station(client: HzppClient, keyword: str) -> Station:
    """Station by id, or by a (possibly abbreviated) name"""
    station = await client.get_station_by_id(keyword)
    if station:
        return station
    station = await client.stations.match(keyword.replace('_', ' '))
    if not station:
        raise InputException(f'Unknown station: {keyword}')
    return station


def parse_flag_arg(value, name: str) -> bool:
    """A bare `-flag` is True, `-flag yes|no` is read as written"""
    if isinstance(value, bool):
        return value
    if str(value).lower() in ('1', 'true', 'yes', 'y'):
        return True
    if str(value).lower() in ('0', 'false', 'no', 'n'):
        return False
    raise InputException(f'{name} must be yes or no, got {value}')


def parse_date_arg(value: str, name: str):
    try:
        return datetime.strptime(value, '%Y-%m-%d').date()
    except (TypeError, ValueError):
        raise InputException(f'{name} must be YYYY-MM-DD, got {value}')


async def build_journey(client: HzppClient, from_station: str, to_station: str, **kwargs):
    start = await resolve_station(client, from_station)
    dest = await resolve_station(client, to_station)
    departure_date = parse_date_arg(kwargs['d'], 'date') if kwargs.get('d') else get_now().date()
    options = {
        'start_id': start.id,
        'dest_id': dest.id,
        'departure_date': departure_date,
        'departure_time': kwargs.get('t', 'now'),
        'travel_class': int(kwargs.get('c', 2)),
        'train_type': 0 if parse_flag_arg(kwargs.get('direct', False), 'direct') else 1,
        'passenger_count': {'count': int(kwargs.get('p', 1))},
        'bicycle': parse_flag_arg(kwargs.get('b', False), 'bicycle'),
    }
    if kwargs.get('r'):
        options.update(kind='round_trip', return_from_id=dest.id,
                       return_departure_date=parse_date_arg(kwargs['r'], 'return date'))
    else:
        options['kind'] = 'one_way'
    return validate_journey(options)


def format_time(value: datetime) -> str:
    return value.strftime('%H:%M') if value else '--'


def render_timetable(journeys: List[JourneyTimetable]) -> str:
    headers = ['Train', 'Departs', 'Arrives', 'Duration', 'Transfers', 'Price']
    table = [
        [x.departure_number, format_time(x.departure_time), format_time(x.arrival_time), x.duration,
         x.transfers, f'{x.price:.2f} €' + (' !' if x.has_warning else '')]
        for x in journeys]
    return tabulate(table, headers, tablefmt='simple')


def render_train(train: TrainDetails) -> str:
    headers = ['Station', 'Arr', 'Dep', 'Late', 'Stop']
    table = [
        [x.name, format_time(x.arrival_time), format_time(x.departure_time), x.late_time or '',
         'transfer' if x.type == CompositionTypeEnum.TRANSFER else '' if x.station_id else 'passing']
        for x in train.stations]
    return tabulate(table, headers, tablefmt='simple')


def describe_status(train) -> str:
    info = train.train_info if hasattr(train, 'train_info') else train
    if not info:
        return 'no live data'
    status = {
        TrainStatusEnum.ON_TIME: 'on time',
        TrainStatusEnum.WAITING_DEPARTURE: 'waiting to depart',
        TrainStatusEnum.DELAYED: f'late {info.late_minutes} min' if info.late_minutes else 'delayed',
    }.get(info.status, 'unknown')
    state = TrainStateEnum(info.state).name.lower()
    station = info.current_station.name if info.current_station else '--'
    bus = ' (replacement bus)' if info.is_replacement_bus else ''
    return f'{status}, {state} at {station} {info.at_time.strftime("%d.%m. %H:%M")}{bus}'


async def handle_list_stations(message, keyword: str = None, _client: HzppClient = None, **kwargs):
    stations = await _client.stations.search(keyword) if keyword else await _client.get_stations()
    if not stations:
        await message.reply(content=f'No station matches {keyword}')
        return
    await message.reply(content=tabulate([[x.id, x.name] for x in stations], ['Id', 'Name'], tablefmt='simple'))


async def handle_search(message, from_station: str, to_station: str, _client: HzppClient = None, **kwargs):
    journey = await build_journey(_client, from_station, to_station, **kwargs)
    routes = await _client.get_journey_routes(journey)
    content = f'Outward {journey.departure_date}:\n{render_timetable(routes.outward_journeys)}\n'
    if routes.return_journeys is not None:
        content += f'\nReturn {journey.return_departure_date}:\n{render_timetable(routes.return_journeys)}\n'
    await message.reply(content=content)


async def handle_schedule(message, from_station: str, to_station: str, departure_number: str,
                          _client: HzppClient = None, **kwargs):
    journey = await build_journey(_client, from_station, to_station, **kwargs)
    trip_type = TripTypeEnum.RETURN if kwargs.get('return') else TripTypeEnum.OUTWARD
    schedule = await _client.get_journey_route_schedule(journey, departure_number, trip_type)
    segmented = _client.convert_journey_schedule_to_segments(schedule)

    content = (f'{segmented.from_station} -> {segmented.to_station} '
               f'{segmented.should_start_at.strftime("%d.%m. %H:%M")} - {format_time(segmented.should_end_at)}'
               f' ({segmented.total_duration or "--"}, transfers {segmented.transfer_duration})\n')
    for segment in segmented.segments:
        if isinstance(segment, TrainDetails):
            content += f'\n{segment.index}. Train {segment.train_number}\n{render_train(segment)}\n'
        else:
            content += (f'\n{segment.index}. Change at {segment.transfer_station} to {segment.transfer_to_train}'
                        f' ({segment.transfer_duration or "--"})\n')
    await message.reply(content=content)


async def handle_train_info(message, train_number: str, _client: HzppClient = None, **kwargs):
    info = await _client.get_train_info(train_number)
    await message.reply(content=f'Train {train_number}: {describe_status(info)}')


async def handle_progress(message, from_station: str, to_station: str, departure_number: str,
                          _client: HzppClient = None, **kwargs):
    journey = await build_journey(_client, from_station, to_station, **kwargs)
    routes = await _client.get_journey_routes(journey)
    details = next((x for x in routes.outward_journeys if x.departure_number == departure_number), None)
    if not details:
        raise InputException(f'No journey {departure_number} in the search results')
    schedule = await _client.get_journey_schedule_with_train_info(journey, departure_number)
    extended = ExtendedJourney(details=details, schedule=schedule)

    content = f'{schedule.from_station} -> {schedule.to_station}: {calculate_journey_percentage(extended):.0f}%\n'
    for train in schedule.trains:
        content += f' - {train.train_number}: {describe_status(train)}\n'
    await message.reply(content=content)
