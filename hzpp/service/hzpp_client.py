import asyncio
import logging
from datetime import datetime
from typing import List, Optional

from hzpp.config import ManagerConfig
from hzpp.schemas.Constants import TripTypeEnum
from hzpp.schemas.JourneySchemas import Station, RollingStockInfo, JourneyRoutes, InternalJourneyData, \
    JourneyRouteSchedule, TrainInfo, ExtendedJourneyRouteSchedule, ExtendedJourneyRoutes, ExtendedJourney, \
    JourneyRouteScheduleSegments, OneWayJourney, RoundTripJourney, JourneyTimetable
from hzpp.service import composition_service, journey_service, realtime_service
from hzpp.service.station_service import StationDirectory, RollingStockCatalog
from hzpp.utils.FlexibleCache import FlexibleCache, hash_object
from hzpp.utils.exceptions import InputException, PreconditionException
from hzpp.utils.segment_utils import convert_schedule_to_segments, calculate_journey_percentage
from hzpp.utils.time_utils import get_now
from hzpp.utils.validation_utils import parse_or_raise

logger = logging.getLogger(__name__)


class HzppClient:
    """
    Entry point for searching journeys, rebuilding their train schedules and following them live.

    The station directory and rolling stock catalog are injected handles; pass the same handle to
    several clients to share one snapshot.
    """

    def __init__(self, stations: StationDirectory = None, rolling_stock: RollingStockCatalog = None, **kwargs):
        self.config = ManagerConfig(**kwargs)
        self.stations = stations or StationDirectory()
        self.rolling_stock = rolling_stock or RollingStockCatalog()
        self.cache: Optional[FlexibleCache[str]] = FlexibleCache(self.config.cache_ttl_seconds,
                                                                 self.config.cache_maxsize) \
            if self.config.cache_ttl_seconds > 0 else None

    def _cache_get(self, key: str):
        if self.cache is not None and self.cache.has(key):
            return self.cache.get(key)
        return None

    def _cache_set(self, key: str, value):
        if self.cache is None:
            return
        # expired entries are swept in the background once a loop is running
        self.cache.start_auto_purge()
        self.cache.set(key, value)

    def close(self):
        if self.cache is not None:
            self.cache.stop_auto_purge()

    async def get_stations(self, force: bool = False) -> List[Station]:
        return await self.stations.get(force)

    async def get_station_by_id(self, station_id: str) -> Optional[Station]:
        return await self.stations.get_by_id(station_id)

    async def get_locomotives(self, force: bool = False) -> List[RollingStockInfo]:
        return await self.rolling_stock.get_locomotives(force)

    async def get_wagons(self, force: bool = False) -> List[RollingStockInfo]:
        return await self.rolling_stock.get_wagons(force)

    async def get_train_types(self, force: bool = False) -> List[RollingStockInfo]:
        return await self.rolling_stock.get_train_types(force)

    async def _get_journey_internal(self, journey) -> InternalJourneyData:
        journey = journey_service.validate_journey(journey)
        cache_key = hash_object(journey)
        if cached := self._cache_get(cache_key):
            return cached

        data = await journey_service.search_journeys(journey)
        self._cache_set(cache_key, data)
        return data

    async def get_journey_routes(self, journey) -> JourneyRoutes:
        data = await self._get_journey_internal(journey)
        return JourneyRoutes(outward_journeys=data.outward_journeys, return_journeys=data.return_journeys)

    async def get_journey_route_schedule(self, journey, departure_number: str,
                                         trip_type: TripTypeEnum = TripTypeEnum.OUTWARD) -> JourneyRouteSchedule:
        journey = journey_service.validate_journey(journey)
        departure_date = self._trip_date(journey, trip_type)
        journey_data = await self._get_journey_internal(journey)

        cache_key = hash_object({'journey': journey.model_dump(mode='json'),
                                 'departure_number': departure_number, 'trip_type': trip_type.value})
        if cached := self._cache_get(cache_key):
            return cached

        schedule = await composition_service.get_route_schedule(journey_data, departure_date, departure_number,
                                                                await self.stations.get(), trip_type)
        self._cache_set(cache_key, schedule)
        return schedule

    @staticmethod
    def _trip_date(journey: OneWayJourney | RoundTripJourney, trip_type: TripTypeEnum):
        if trip_type == TripTypeEnum.OUTWARD:
            return journey.departure_date
        if isinstance(journey, RoundTripJourney):
            return journey.return_departure_date
        raise InputException('Return trip requested for a one-way journey.')

    def _require_auth_token(self):
        if not self.config.auth_token:
            raise PreconditionException('Auth token is required to fetch train info.')

    async def get_train_info(self, train_number: str) -> TrainInfo:
        self._require_auth_token()
        return await realtime_service.get_train_info(train_number, self.config.auth_token, await self.stations.get())

    async def get_journey_schedule_with_train_info(self, journey, departure_number: str,
                                                   trip_type: TripTypeEnum = TripTypeEnum.OUTWARD,
                                                   now: datetime = None) -> ExtendedJourneyRouteSchedule:
        self._require_auth_token()
        schedule = await self.get_journey_route_schedule(journey, departure_number, trip_type)
        return await realtime_service.merge_train_info(schedule, self.get_train_info,
                                                       self.config.minute_deviation_train_info, now or get_now())

    async def _get_extended_journeys(self, journey, candidates: List[JourneyTimetable],
                                     trip_type: TripTypeEnum, now: datetime) -> List[ExtendedJourney]:
        unique: List[JourneyTimetable] = []
        for candidate in candidates:
            if all(x.departure_number != candidate.departure_number for x in unique):
                unique.append(candidate)

        results = await asyncio.gather(
            *[self.get_journey_schedule_with_train_info(journey, x.departure_number, trip_type, now) for x in unique],
            return_exceptions=True)

        journeys = []
        for details, result in zip(unique, results):
            if isinstance(result, Exception):
                logger.warning(f'Dropping journey {details.departure_number} ({trip_type.value})', exc_info=result)
                continue
            journeys.append(ExtendedJourney(details=details, schedule=result))
        return journeys

    async def get_journey_route_schedules(self, journey, now: datetime = None) -> ExtendedJourneyRoutes:
        """Every candidate of a search with its live schedule, candidates that fail are left out"""
        self._require_auth_token()
        journey = journey_service.validate_journey(journey)
        now = now or get_now()
        routes = await self.get_journey_routes(journey)

        outward = await self._get_extended_journeys(journey, routes.outward_journeys, TripTypeEnum.OUTWARD, now)
        returns = None
        if isinstance(journey, RoundTripJourney):
            returns = await self._get_extended_journeys(journey, routes.return_journeys or [], TripTypeEnum.RETURN,
                                                        now)
        return parse_or_raise(ExtendedJourneyRoutes, {'outward_journeys': outward, 'return_journeys': returns},
                              'extended journey')

    @staticmethod
    def convert_journey_schedule_to_segments(schedule: JourneyRouteSchedule) -> JourneyRouteScheduleSegments:
        return convert_schedule_to_segments(schedule)

    @staticmethod
    def calculate_journey_percentage(journey: ExtendedJourney, current_time: datetime = None) -> float:
        return calculate_journey_percentage(journey, current_time)
