import unittest
from datetime import timedelta

from hzpp.events.journey_events import parse_flag_arg, build_journey
from hzpp.schemas.Constants import TrainTypeEnum
from hzpp.service.hzpp_client import HzppClient
from hzpp.service.station_service import StationDirectory
from hzpp.utils.exceptions import InputException
from hzpp.utils.time_utils import get_now
from html_fixtures import STATIONS

DAY = get_now().date() + timedelta(days=3)


class FlagArgTests(unittest.TestCase):
    def test_bare_switch(self):
        self.assertTrue(parse_flag_arg(True, 'bicycle'))
        self.assertFalse(parse_flag_arg(False, 'bicycle'))

    def test_written_values(self):
        for value in ('yes', 'Y', 'true', '1'):
            self.assertTrue(parse_flag_arg(value, 'bicycle'), value)
        for value in ('no', 'N', 'false', 'FALSE', '0'):
            self.assertFalse(parse_flag_arg(value, 'bicycle'), value)

    def test_anything_else_is_rejected(self):
        with self.assertRaisesRegex(InputException, 'bicycle must be yes or no'):
            parse_flag_arg('maybe', 'bicycle')


class BuildJourneyTests(unittest.IsolatedAsyncioTestCase):
    def setUp(self):
        self.client = HzppClient(StationDirectory(STATIONS))
        self.addCleanup(self.client.close)

    async def test_written_false_keeps_switch_off(self):
        journey = await build_journey(self.client, '72460', '71000', d=DAY.isoformat(), b='false', direct='no')
        self.assertIs(journey.bicycle, False)
        self.assertEqual(journey.train_type, TrainTypeEnum.ALL)

    async def test_bare_switch_turns_on(self):
        journey = await build_journey(self.client, '72460', '71000', d=DAY.isoformat(), b=True, direct=True)
        self.assertIs(journey.bicycle, True)
        self.assertEqual(journey.train_type, TrainTypeEnum.DIRECT)

    async def test_defaults(self):
        journey = await build_journey(self.client, 'Zagreb_Gl._kol.', 'Rijeka', d=DAY.isoformat())
        self.assertIs(journey.bicycle, False)
        self.assertEqual(journey.kind, 'one_way')
        self.assertEqual(journey.start_id, '72460')

    async def test_bad_flag_value(self):
        with self.assertRaises(InputException):
            await build_journey(self.client, '72460', '71000', d=DAY.isoformat(), b='sometimes')


if __name__ == '__main__':
    unittest.main()
