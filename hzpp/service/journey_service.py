import logging
from datetime import date, timedelta
from typing import Dict, List, Optional

from hzpp import config
from hzpp.schemas.Constants import TrainTypeEnum
from hzpp.schemas.JourneySchemas import JourneyOptions, OneWayJourney, RoundTripJourney, InternalJourneyData, \
    PassengerCount
from hzpp.utils import http_utils
from hzpp.utils.exceptions import InputException, ParseException
from hzpp.utils.html_utils import parse_html, text_of, has_class_xpath, input_value
from hzpp.utils.time_utils import create_date, time_string_to_minutes, get_now
from hzpp.utils.validation_utils import safe_parse, parse_or_raise

logger = logging.getLogger(__name__)

OUTWARD_TABLE_ID = 'outwardJourneyTableContainer'
RETURN_TABLE_ID = 'returnJourneyTableContainer'


def validate_journey(journey, today: date = None) -> OneWayJourney | RoundTripJourney:
    """
    Check search input before anything is sent to the portal.
    :param journey: a journey model or a raw mapping with a `kind` of "one_way" or "round_trip"
    :raises InputException: the first rule the input breaks
    """
    if not isinstance(journey, (OneWayJourney, RoundTripJourney)):
        result = safe_parse(JourneyOptions, journey)
        if not result.success:
            raise InputException(f"Invalid journey options: {' '.join(result.errors)}")
        journey = result.data

    today = today or get_now().date()
    if journey.start_id == journey.dest_id:
        raise InputException('Start and destination stations cannot be the same.')
    if journey.departure_date < today:
        raise InputException('Departure date cannot be in the past.')
    if isinstance(journey, RoundTripJourney):
        if journey.return_departure_date < today:
            raise InputException('Return departure date cannot be in the past.')
        if journey.return_departure_date < journey.departure_date:
            raise InputException('Return departure date cannot be before the departure date.')
    return journey


def build_search_params(journey: OneWayJourney | RoundTripJourney) -> Dict[str, str]:
    params = {
        'StartId': journey.start_id,
        'DestId': journey.dest_id,
        'Class': str(int(journey.travel_class)),
        'DepartureDate': journey.departure_date.isoformat(),
        'DirectTrains': 'True' if journey.train_type == TrainTypeEnum.DIRECT else 'False',
    }
    if journey.via_id:
        params['ViaId'] = journey.via_id

    passengers: List[PassengerCount] = list(journey.passenger_count) \
        if isinstance(journey.passenger_count, tuple) else [journey.passenger_count]
    for i, passenger in enumerate(passengers, start=1):
        params[f'Passenger{i}Count'] = str(passenger.count)
        if passenger.benefit_id:
            params[f'Benefit{i}Id'] = str(int(passenger.benefit_id))

    if journey.bicycle:
        params['Bicycle'] = 'True'

    if journey.kind == 'round_trip':
        params['ReturnTrip'] = 'True'
        params['ReturnFromId'] = journey.return_from_id
        params['ReturnDepartureDate'] = journey.return_departure_date.isoformat()
        if journey.return_bicycle:
            params['ReturnBicycle'] = 'True'
    elif journey.kind != 'one_way':
        raise InputException(f'Unknown journey kind: {journey.kind}')
    return params


def parse_price(text: str) -> float:
    # "12,34 €"
    cleaned = text.replace('€', '').replace('\xa0', '').replace(' ', '').replace(',', '.')
    return float(cleaned)


def parse_journey_row(row, departure_date: date) -> dict:
    cells = row.xpath(f'.//*[{has_class_xpath("cell")}]')
    if len(cells) < 6:
        raise ParseException(f'Failed to parse journey data: expected 6 cells, got {len(cells)}.')

    departure_time = create_date(departure_date, text_of(cells[0]))
    duration = text_of(cells[3])
    arrival_time = create_date(departure_date, text_of(cells[2]))

    # printed arrival is a bare time, the duration tells whether it falls on the next day
    calculated_arrival = departure_time + timedelta(minutes=time_string_to_minutes(duration))
    if calculated_arrival.date() != departure_time.date() and arrival_time < departure_time:
        arrival_time += timedelta(days=1)

    links = cells[1].xpath('.//a')
    departure_number = text_of(links[0]) if links else text_of(cells[1])

    try:
        transfers = int(text_of(cells[4]))
        price = parse_price(text_of(cells[5]))
    except ValueError as e:
        raise ParseException(f'Failed to parse journey data: {e}.') from e

    return {
        'departure_time': departure_time,
        'departure_number': departure_number,
        'arrival_time': arrival_time,
        'duration': duration,
        'transfers': transfers,
        'price': price,
        'has_warning': len(cells[5].xpath(f'.//*[{has_class_xpath("warningIcon")}]')) > 0,
    }


def parse_journey_table(tree, container_id: str, departure_date: date) -> List[dict]:
    rows = tree.xpath(f'//*[@id="{container_id}"]//*[{has_class_xpath("item")} and {has_class_xpath("row")}]')
    return [parse_journey_row(row, departure_date) for row in rows]


def parse_journey_page(html: str, journey: OneWayJourney | RoundTripJourney, cookies: str = '') -> InternalJourneyData:
    tree = parse_html(html)

    csrf_token = input_value(tree, '__RequestVerificationToken')
    state_for_client = input_value(tree, 'StateForClient')
    if not csrf_token or not state_for_client:
        raise ParseException('Missing CSRF token or state value.')

    return_journeys: Optional[List[dict]] = None
    if journey.kind == 'round_trip':
        return_journeys = parse_journey_table(tree, RETURN_TABLE_ID, journey.return_departure_date)

    data = {
        'outward_journeys': parse_journey_table(tree, OUTWARD_TABLE_ID, journey.departure_date),
        'return_journeys': return_journeys,
        'state_for_client': state_for_client,
        'csrf_token': csrf_token,
        'cookies': cookies,
    }
    return parse_or_raise(InternalJourneyData, data, 'journey')


async def search_journeys(journey: OneWayJourney | RoundTripJourney) -> InternalJourneyData:
    resp = await http_utils.fetch(config.PORTAL_URL, params=build_search_params(journey),
                                  invalid_message='Invalid journey data.')
    result = parse_journey_page(resp.text, journey, cookies=http_utils.get_cookie_header(resp))
    logger.info(f'journey {journey.start_id}->{journey.dest_id} {journey.departure_date}: '
                f'{len(result.outward_journeys)} outward, {len(result.return_journeys or [])} return')
    return result
