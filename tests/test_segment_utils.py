import unittest
from datetime import date, datetime, timedelta

from hzpp.schemas.Constants import CompositionTypeEnum, TrainStateEnum, TrainStatusEnum
from hzpp.schemas.JourneySchemas import TrainDetails, TransferDetails, ExtendedJourney, JourneyTimetable, \
    ExtendedJourneyRouteSchedule, JourneyRouteSchedule, TrainInfo, Station
from hzpp.service.composition_service import parse_composition_page
from hzpp.utils.segment_utils import convert_schedule_to_segments, segments_to_trains, \
    calculate_journey_percentage, get_current_train, get_all_journey_stations, is_train_delayed, is_train_on_time
from html_fixtures import STATIONS, SINGLE_TRAIN_ROWS, TRANSFER_ROWS, composition_page

DAY = date(2026, 10, 18)
START = datetime(2026, 10, 18, 10, 0)
END = datetime(2026, 10, 18, 12, 0)


class SegmentTests(unittest.TestCase):
    def test_transfer_inserted_between_trains(self):
        schedule = parse_composition_page(composition_page(TRANSFER_ROWS), DAY, '100', STATIONS)
        segmented = convert_schedule_to_segments(schedule)

        self.assertEqual([x.index for x in segmented.segments], [1, 2, 3])
        first, transfer, second = segmented.segments
        self.assertIsInstance(first, TrainDetails)
        self.assertIsInstance(transfer, TransferDetails)
        self.assertEqual(transfer.transfer_station, 'Ogulin')
        self.assertEqual(transfer.transfer_station_id, '73000')
        self.assertEqual(transfer.transfer_to_train, '200')
        self.assertEqual(transfer.transfer_duration, '00:30')
        self.assertEqual(second.train_number, '200')
        self.assertEqual(segmented.from_station, schedule.from_station)

    def test_trains_recovered_and_input_untouched(self):
        schedule = parse_composition_page(composition_page(TRANSFER_ROWS), DAY, '100', STATIONS)
        before = schedule.model_dump()
        segmented = convert_schedule_to_segments(schedule)
        self.assertEqual(schedule.model_dump(), before)
        self.assertEqual(segments_to_trains(segmented), schedule.trains)

    def test_one_transfer_when_both_boundary_stops_are_marked(self):
        arrive = datetime(2026, 10, 18, 11, 0)
        leave = datetime(2026, 10, 18, 11, 30)
        schedule = JourneyRouteSchedule(
            departure_number='100', from_station='A', to_station='C', should_start_at=START, should_end_at=END,
            trains=[
                {'index': 0, 'train_number': '100', 'should_depart_at': START, 'should_arrive_at': arrive,
                 'stations': [stop(0, 'a', 'A', departure=START, _type=CompositionTypeEnum.STARTING_POINT),
                              stop(1, 'b', 'B', arrival=arrive, _type=CompositionTypeEnum.TRANSFER) | {
                                  'waiting_time': '00:20'}]},
                {'index': 1, 'train_number': '200', 'should_depart_at': leave, 'should_arrive_at': END,
                 'stations': [stop(0, 'b', 'B', arrive, leave, _type=CompositionTypeEnum.TRANSFER) | {
                                  'waiting_time': '00:30'},
                              stop(1, 'c', 'C', arrival=END, _type=CompositionTypeEnum.DESTINATION)]},
            ])
        segmented = convert_schedule_to_segments(schedule)
        self.assertEqual([type(x) for x in segmented.segments], [TrainDetails, TransferDetails, TrainDetails])
        transfer = segmented.segments[1]
        self.assertEqual((transfer.transfer_station_id, transfer.transfer_to_train), ('b', '200'))
        self.assertEqual(transfer.transfer_duration, '00:30')

    def test_single_train_has_no_transfer(self):
        schedule = parse_composition_page(composition_page(SINGLE_TRAIN_ROWS), DAY, '2201', STATIONS)
        segmented = convert_schedule_to_segments(schedule)
        self.assertEqual(len(segmented.segments), 1)
        self.assertEqual(segmented.segments[0].index, 1)


def stop(index, station_id, name, arrival=None, departure=None, _type=CompositionTypeEnum.INTERMEDIATE):
    return {'index': index, 'station_id': station_id, 'name': name, 'arrival_time': arrival,
            'departure_time': departure, 'type': _type}


def journey(current_station=None, late_minutes=None, with_info=True):
    info = None
    if with_info:
        info = TrainInfo(train_number='2201', current_station=current_station, at_time=START,
                         late_minutes=late_minutes, state=TrainStateEnum.DEPARTURE,
                         status=TrainStatusEnum.DELAYED if late_minutes else TrainStatusEnum.ON_TIME)
    schedule = ExtendedJourneyRouteSchedule(
        departure_number='2201', from_station='A', to_station='C', should_start_at=START, should_end_at=END,
        trains=[{
            'index': 0, 'train_number': '2201', 'should_depart_at': START, 'should_arrive_at': END,
            'train_info': info,
            'stations': [
                stop(0, 'a', 'A', departure=START, _type=CompositionTypeEnum.STARTING_POINT),
                stop(1, 'b', 'B', START + timedelta(minutes=59), START + timedelta(minutes=61)),
                stop(2, 'c', 'C', arrival=END, _type=CompositionTypeEnum.DESTINATION),
            ]}])
    details = JourneyTimetable(departure_time=START, departure_number='2201', arrival_time=END,
                               duration='02:00', transfers=0, price=10)
    return ExtendedJourney(details=details, schedule=schedule)


class PercentageTests(unittest.TestCase):
    def test_finished_journey(self):
        self.assertEqual(calculate_journey_percentage(journey(with_info=False), END + timedelta(hours=1)), 100)

    def test_future_journey(self):
        self.assertEqual(calculate_journey_percentage(journey(with_info=False), START - timedelta(hours=1)), 0)

    def test_time_based_without_position(self):
        self.assertAlmostEqual(calculate_journey_percentage(journey(), START + timedelta(hours=1)), 50)

    def test_station_based(self):
        result = calculate_journey_percentage(journey(Station(id='b', name='B')), START + timedelta(hours=1))
        self.assertAlmostEqual(result, 50 + 50 / 3)

    def test_delay_shifts_the_window(self):
        now = datetime(2026, 10, 18, 12, 15)
        self.assertAlmostEqual(calculate_journey_percentage(journey(late_minutes=30), now), 87.5)
        self.assertEqual(get_current_train(journey(late_minutes=30), now).train_number, '2201')
        self.assertIsNone(get_current_train(journey(), now))

    def test_bounds(self):
        for minutes in range(-30, 180, 7):
            value = calculate_journey_percentage(journey(Station(id='c', name='C'), late_minutes=20),
                                                 START + timedelta(minutes=minutes))
            self.assertGreaterEqual(value, 0)
            self.assertLessEqual(value, 100)

    def test_stations_in_order(self):
        self.assertEqual([x.id for x in get_all_journey_stations(journey())], ['a', 'b', 'c'])

    def test_status_predicates(self):
        on_time = journey().schedule.trains[0]
        delayed = journey(late_minutes=5).schedule.trains[0]
        self.assertTrue(is_train_on_time(on_time))
        self.assertFalse(is_train_delayed(on_time))
        self.assertTrue(is_train_delayed(delayed.train_info))
        self.assertFalse(is_train_on_time(journey(with_info=False).schedule.trains[0]))


if __name__ == '__main__':
    unittest.main()
