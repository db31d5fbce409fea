import re
import urllib.parse
from datetime import datetime, date
from typing import Annotated, List, Optional, Union, Tuple, Literal

from pydantic import BaseModel, ConfigDict, Field, StrictBool, field_validator

from hzpp.schemas.Constants import ClassEnum, TrainTypeEnum, DiscountEnum, CompositionTypeEnum, TrainFeaturesEnum, \
    TrainStateEnum, TrainStatusEnum

# "HH:mm", also used for durations and waiting/late times
HHmm = Annotated[str, Field(pattern=r'^\d{2}:\d{2}$')]


class Station(BaseModel):
    """Station from the portal directory, `id` is the canonical identity"""
    model_config = ConfigDict(frozen=True)

    id: str
    name: str


class StationNullId(BaseModel):
    """Station as printed in a composition table, possibly unmatched"""
    index: int
    id: Optional[str] = None
    name: str


class RollingStockInfo(BaseModel):
    """Locomotive, wagon or train type"""
    name: str
    image: str

    @field_validator('image')
    @classmethod
    def check_image_url(cls, value: str) -> str:
        parsed = urllib.parse.urlparse(value)
        if parsed.scheme not in ('http', 'https') or not parsed.netloc:
            raise ValueError('Invalid url')
        return value


class PassengerCount(BaseModel):
    count: int = Field(ge=1, le=6)
    benefit_id: Optional[DiscountEnum] = None


class JourneyBase(BaseModel):
    start_id: str
    dest_id: str
    via_id: Optional[str] = None

    travel_class: ClassEnum = ClassEnum.SECOND
    train_type: TrainTypeEnum = TrainTypeEnum.ALL

    departure_date: date
    departure_time: str = 'now'  # HH:mm or "now"
    passenger_count: Union[PassengerCount, Tuple[PassengerCount, PassengerCount]] = PassengerCount(count=1)

    bicycle: StrictBool = False

    @field_validator('departure_time')
    @classmethod
    def check_departure_time(cls, value: str) -> str:
        if value == 'now':
            return value
        matched = re.match(r'^(\d{2}):(\d{2})$', value)
        if not matched or int(matched.group(1)) > 23 or int(matched.group(2)) > 59:
            raise ValueError('Invalid time format. Expected HH:mm or "now"')
        return value


class OneWayJourney(JourneyBase):
    kind: Literal['one_way'] = 'one_way'


class RoundTripJourney(JourneyBase):
    kind: Literal['round_trip'] = 'round_trip'

    return_from_id: str
    return_departure_date: date
    return_bicycle: StrictBool = False


JourneyOptions = Annotated[Union[OneWayJourney, RoundTripJourney], Field(discriminator='kind')]


class JourneyTimetable(BaseModel):
    """One row of the search results table"""
    departure_time: datetime
    departure_number: str
    arrival_time: datetime
    duration: HHmm
    transfers: int
    price: float
    has_warning: bool = False


class JourneyRoutes(BaseModel):
    outward_journeys: List[JourneyTimetable]
    return_journeys: Optional[List[JourneyTimetable]] = None


class InternalJourneyData(JourneyRoutes):
    """Search results plus the tokens needed to request a composition"""
    state_for_client: str = Field(min_length=1)
    csrf_token: str = Field(min_length=1)
    cookies: str


class ScheduledStop(BaseModel):
    index: int
    name: str
    station_id: Optional[str] = None
    arrival_time: Optional[datetime] = None
    departure_time: Optional[datetime] = None
    waiting_time: Optional[HHmm] = None
    late_time: Optional[HHmm] = None
    type: CompositionTypeEnum


class TrainInfo(BaseModel):
    """Live position of a train"""
    train_number: str
    current_station: Optional[Station] = None
    is_replacement_bus: bool = False
    at_time: datetime  # departure, formed or finished time
    late_minutes: Optional[int] = None
    state: TrainStateEnum
    status: TrainStatusEnum


class TrainDetails(BaseModel):
    """One physical train run of a journey"""
    segment_type: Literal['train'] = 'train'
    index: int
    train_number: str
    should_depart_at: Optional[datetime] = None
    should_arrive_at: Optional[datetime] = None
    features: List[TrainFeaturesEnum] = []
    stations: List[ScheduledStop] = Field(min_length=1)


class TransferDetails(BaseModel):
    segment_type: Literal['transfer'] = 'transfer'
    index: int
    transfer_to_train: str
    transfer_duration: Optional[str] = None
    transfer_station: str
    transfer_station_id: Optional[str] = None


class ExtendedTrainDetails(TrainDetails):
    train_info: Optional[TrainInfo] = None


class JourneyRouteScheduleBase(BaseModel):
    departure_number: str
    from_station: str
    to_station: str
    should_start_at: datetime
    should_end_at: datetime
    total_duration: Optional[HHmm] = None
    transfer_duration: Optional[HHmm] = None


class JourneyRouteSchedule(JourneyRouteScheduleBase):
    trains: List[TrainDetails]


class ExtendedJourneyRouteSchedule(JourneyRouteScheduleBase):
    trains: List[ExtendedTrainDetails]


class JourneyRouteScheduleSegments(JourneyRouteScheduleBase):
    """Display view, trains interleaved with transfers and indexed from 1"""
    segments: List[Union[TrainDetails, TransferDetails]]


class ExtendedJourney(BaseModel):
    details: JourneyTimetable
    schedule: ExtendedJourneyRouteSchedule


class ExtendedJourneyRoutes(BaseModel):
    outward_journeys: List[ExtendedJourney]
    return_journeys: Optional[List[ExtendedJourney]] = None
