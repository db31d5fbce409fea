import unittest
from datetime import date, datetime

from hzpp.utils.exceptions import ParseException
from hzpp.utils.time_utils import create_date, create_date_with_time, time_string_to_minutes, \
    format_minutes_to_time, calculate_duration, parse_live_timestamp, split_time


class TimeReconstructionTests(unittest.TestCase):
    def test_plain_time_on_reference_date(self):
        self.assertEqual(create_date_with_time(date(2024, 6, 1), '10:15'), datetime(2024, 6, 1, 10, 15))

    def test_reference_datetime_contributes_only_its_date(self):
        self.assertEqual(create_date_with_time(datetime(2024, 6, 1, 22, 0), '08:05'), datetime(2024, 6, 1, 8, 5))

    def test_rolls_over_midnight_after_anchor(self):
        result = create_date_with_time(date(2024, 6, 1), '00:10', datetime(2024, 6, 1, 23, 50))
        self.assertEqual(result, datetime(2024, 6, 2, 0, 10))

    def test_earlier_clock_time_moves_to_next_day(self):
        result = create_date_with_time(date(2024, 6, 1), '09:30', datetime(2024, 6, 1, 10, 0))
        self.assertEqual(result, datetime(2024, 6, 2, 9, 30))

    def test_lagging_reference_date_rolls_twice(self):
        # anchor already on the next day, the first roll still leaves the time behind it
        result = create_date_with_time(date(2024, 6, 1), '00:30', datetime(2024, 6, 2, 1, 0))
        self.assertEqual(result, datetime(2024, 6, 3, 0, 30))

    def test_second_roll_needs_the_gap_under_a_day(self):
        result = create_date_with_time(date(2024, 6, 1), '00:10', datetime(2024, 6, 2, 23, 50))
        self.assertEqual(result, datetime(2024, 6, 2, 0, 10))

    def test_later_time_stays_on_the_same_day(self):
        result = create_date_with_time(date(2024, 6, 1), '10:01', datetime(2024, 6, 1, 10, 0))
        self.assertEqual(result, datetime(2024, 6, 1, 10, 1))

    def test_missing_or_malformed_time_gives_none(self):
        for value in (None, '', 'abc', '25:00', '10:75', '1015'):
            self.assertIsNone(create_date_with_time(date(2024, 6, 1), value), value)

    def test_mandatory_variant_raises(self):
        with self.assertRaises(ParseException):
            create_date(date(2024, 6, 1), 'xx:yy')
        self.assertEqual(create_date(date(2024, 6, 1), '06:15'), datetime(2024, 6, 1, 6, 15))

    def test_split_time(self):
        self.assertEqual(split_time(' 07:05 '), (7, 5))
        self.assertIsNone(split_time('24:00'))


class MinutesTests(unittest.TestCase):
    def test_minutes_round_trip_over_a_day(self):
        for minutes in range(24 * 60):
            self.assertEqual(time_string_to_minutes(format_minutes_to_time(minutes)), minutes)

    def test_format_pads_with_zeroes(self):
        self.assertEqual(format_minutes_to_time(65), '01:05')
        self.assertEqual(format_minutes_to_time(0), '00:00')

    def test_malformed_string_counts_as_zero(self):
        self.assertEqual(time_string_to_minutes('abc'), 0)
        self.assertEqual(time_string_to_minutes(None), 0)

    def test_duration_crosses_midnight(self):
        self.assertEqual(calculate_duration('23:10', '01:05'), '01:55')
        self.assertEqual(calculate_duration('10:00', '12:30'), '02:30')
        self.assertIsNone(calculate_duration('10:00', 'later'))

    def test_live_timestamp(self):
        self.assertEqual(parse_live_timestamp('18.10.26 10:12'), datetime(2026, 10, 18, 10, 12))
        self.assertIsNone(parse_live_timestamp('yesterday'))


if __name__ == '__main__':
    unittest.main()
