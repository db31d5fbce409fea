import logging
from datetime import date, datetime, time
from typing import List, Optional, Sequence

from pydantic import BaseModel

from hzpp import config
from hzpp.schemas.Constants import CompositionTypeEnum, TripTypeEnum, features_to_enum
from hzpp.schemas.JourneySchemas import InternalJourneyData, JourneyRouteSchedule, Station, TrainDetails
from hzpp.utils import http_utils
from hzpp.utils.exceptions import ParseException
from hzpp.utils.html_utils import parse_html, text_of, has_class, has_class_xpath, first_text, image_titles
from hzpp.utils.station_utils import match_station_name
from hzpp.utils.time_utils import create_date_with_time, time_string_to_minutes, format_minutes_to_time
from hzpp.utils.validation_utils import parse_or_raise

logger = logging.getLogger(__name__)


class CompositionRow(BaseModel):
    """One row of the train detail table, as printed"""
    name: str
    arrival_time: Optional[str] = None
    departure_time: Optional[str] = None
    late_time: Optional[str] = None
    waiting_time: Optional[str] = None
    train_number: str
    features: List[str] = []
    is_transfer: bool = False
    is_end: bool = False

    @property
    def stop_type(self) -> CompositionTypeEnum:
        if self.is_transfer:
            # a transfer row without arrival is where the journey starts
            return CompositionTypeEnum.TRANSFER if self.arrival_time else CompositionTypeEnum.STARTING_POINT
        if self.is_end:
            return CompositionTypeEnum.DESTINATION
        return CompositionTypeEnum.INTERMEDIATE


def extract_composition_rows(tree) -> List[CompositionRow]:
    rows = []
    for tr in tree.xpath('//table[@id="trainDetailTable"]//tr[td]'):
        cells = tr.xpath('./td')
        if len(cells) < 6:
            raise ParseException(f'Failed to parse train composition data: expected 6 cells, got {len(cells)}.')
        texts = [text_of(x) for x in cells]
        rows.append(CompositionRow(
            name=texts[0],
            arrival_time=texts[1] or None,
            departure_time=texts[2] or None,
            late_time=texts[3] or None,
            waiting_time=texts[4] or None,
            train_number=texts[5],
            features=image_titles(cells[6]) if len(cells) > 6 else [],
            is_transfer=has_class(tr, 'transfer-point'),
            is_end=has_class(tr, 'end-point'),
        ))
    return rows


def reconstruct_trains(rows: Sequence[CompositionRow], departure_date: date,
                       stations: Sequence[Station]) -> List[TrainDetails]:
    """
    Split the rows into train segments and give every printed time an absolute date.

    A segment starts on the first row, on a change of train number, and on a transfer row that has
    an arrival time. Times are resolved top to bottom against the last resolved event, so a day
    rolls over whenever the printed clock goes backwards.
    """
    trains: List[dict] = []
    current: Optional[dict] = None
    current_date: date = departure_date
    previous: Optional[datetime] = None

    for row in rows:
        stop_type = row.stop_type
        arrival_at = create_date_with_time(current_date, row.arrival_time, previous)
        anchor = arrival_at or previous
        departure_at = create_date_with_time(anchor.date() if anchor else current_date, row.departure_time, anchor)

        starts_new = current is None or current['train_number'] != row.train_number \
            or (row.is_transfer and row.arrival_time)
        if starts_new:
            if current is not None:
                # arriving at the first stop of the next train closes the previous one
                if arrival_at:
                    current['should_arrive_at'] = arrival_at
                trains.append(current)
            current = {
                'index': len(trains),
                'train_number': row.train_number,
                'features': features_to_enum(row.features),
                'stations': [],
                'should_depart_at': departure_at if not row.is_end else None,
                'should_arrive_at': arrival_at,
            }

        stop_arrival = arrival_at if stop_type != CompositionTypeEnum.STARTING_POINT else None
        stop_departure = departure_at if stop_type != CompositionTypeEnum.DESTINATION else None
        matched = match_station_name(stations, row.name)
        current['stations'].append({
            'index': len(current['stations']),
            'name': row.name,
            'station_id': matched.id if matched else None,
            'arrival_time': stop_arrival,
            'departure_time': stop_departure,
            'waiting_time': row.waiting_time,
            'late_time': row.late_time,
            'type': stop_type,
        })

        resolved = stop_departure or stop_arrival
        if resolved:
            previous = resolved
            current_date = resolved.date()

        if row.is_end and stop_arrival:
            current['should_arrive_at'] = stop_arrival

    if current is not None:
        last_stop = current['stations'][-1]
        if last_stop['arrival_time']:
            current['should_arrive_at'] = last_stop['arrival_time']
        trains.append(current)

    if not trains or not trains[0]['stations'] or not trains[-1]['stations']:
        raise ParseException('Failed to parse train composition data.')
    return parse_or_raise(List[TrainDetails], trains, 'train composition')


def parse_composition_page(html: str, departure_date: date, departure_number: str,
                           stations: Sequence[Station]) -> JourneyRouteSchedule:
    tree = parse_html(html)
    trains = reconstruct_trains(extract_composition_rows(tree), departure_date, stations)

    station_names = {x.id: x.name for x in stations}
    first_stop = trains[0].stations[0]
    last_stop = trains[-1].stations[-1]
    midnight = datetime.combine(departure_date, time())

    transfer_minutes = sum(time_string_to_minutes(stop.waiting_time)
                           for train in trains for stop in train.stations if stop.waiting_time)

    data = {
        'departure_number': departure_number,
        'trains': trains,
        'from_station': station_names.get(first_stop.station_id, first_stop.name),
        'to_station': station_names.get(last_stop.station_id, last_stop.name),
        'should_start_at': trains[0].should_depart_at or midnight,
        'should_end_at': trains[-1].should_arrive_at or midnight,
        'total_duration': first_text(
            tree, f'//*[{has_class_xpath("disclaimer-content")} and {has_class_xpath("col-1-2")}]//span') or None,
        'transfer_duration': format_minutes_to_time(transfer_minutes),
    }
    return parse_or_raise(JourneyRouteSchedule, data, 'train composition')


async def fetch_composition_page(journey_data: InternalJourneyData, departure_number: str,
                                 trip_type: TripTypeEnum = TripTypeEnum.OUTWARD) -> str:
    form = {
        '__RequestVerificationToken': journey_data.csrf_token,
        'StateForClient': journey_data.state_for_client,
        'TripType': trip_type.value,
        'DepartureNumber': departure_number,
    }
    headers = {
        'Content-Type': 'application/x-www-form-urlencoded',
        'Referer': config.PORTAL_URL,
        'Cookie': journey_data.cookies,
    }
    resp = await http_utils.fetch(config.TRANSPORTATIONS_URL, 'post', data=form, headers=headers,
                                  invalid_message='Invalid train ID or trip type.')
    return resp.text


async def get_route_schedule(journey_data: InternalJourneyData, departure_date: date, departure_number: str,
                             stations: Sequence[Station],
                             trip_type: TripTypeEnum = TripTypeEnum.OUTWARD) -> JourneyRouteSchedule:
    html = await fetch_composition_page(journey_data, departure_number, trip_type)
    schedule = parse_composition_page(html, departure_date, departure_number, stations)
    logger.info(f'composition {departure_number} ({trip_type.value}): {len(schedule.trains)} trains, '
                f'{schedule.from_station} -> {schedule.to_station}')
    return schedule
