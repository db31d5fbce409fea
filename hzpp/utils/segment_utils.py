from datetime import datetime, timedelta
from typing import List, Optional, Union

from hzpp.schemas.Constants import CompositionTypeEnum, TrainStatusEnum
from hzpp.schemas.JourneySchemas import JourneyRouteSchedule, JourneyRouteScheduleSegments, TrainDetails, \
    TransferDetails, ScheduledStop, ExtendedJourney, ExtendedTrainDetails, StationNullId, TrainInfo
from hzpp.utils.time_utils import get_now


def _transfer_stop(previous_train: TrainDetails, next_train: TrainDetails) -> Optional[ScheduledStop]:
    first_stop = next_train.stations[0]
    if first_stop.type == CompositionTypeEnum.TRANSFER:
        return first_stop
    last_stop = previous_train.stations[-1]
    if last_stop.type == CompositionTypeEnum.TRANSFER:
        return last_stop
    return None


def convert_schedule_to_segments(schedule: JourneyRouteSchedule) -> JourneyRouteScheduleSegments:
    """
    Interleave the trains of a schedule with one transfer between every two trains that share a
    transfer stop. Everything is renumbered from 1; the schedule itself is left untouched.
    """
    trains = sorted(schedule.trains, key=lambda x: x.index)
    segments: List[Union[TrainDetails, TransferDetails]] = []
    for i, train in enumerate(trains):
        if i > 0 and (stop := _transfer_stop(trains[i - 1], train)):
            segments.append(TransferDetails(
                index=len(segments) + 1,
                transfer_station=stop.name,
                transfer_station_id=stop.station_id,
                transfer_to_train=train.train_number,
                transfer_duration=stop.waiting_time or schedule.transfer_duration,
            ))
        segments.append(train.model_copy(update={'index': len(segments) + 1}))

    data = {k: v for k, v in schedule if k != 'trains'}
    return JourneyRouteScheduleSegments(**data, segments=segments)


def segments_to_trains(segmented: JourneyRouteScheduleSegments) -> List[TrainDetails]:
    """Trains of a segmented view, numbered from 0 again"""
    trains = [x for x in sorted(segmented.segments, key=lambda s: s.index) if isinstance(x, TrainDetails)]
    return [train.model_copy(update={'index': i}) for i, train in enumerate(trains)]


def get_max_delay_minutes(journey: ExtendedJourney) -> int:
    return max([x.train_info.late_minutes for x in journey.schedule.trains
                if x.train_info and x.train_info.late_minutes] or [0])


def get_delayed_time(scheduled: Optional[datetime], journey: ExtendedJourney) -> Optional[datetime]:
    if not scheduled:
        return None
    return scheduled + timedelta(minutes=get_max_delay_minutes(journey))


def get_all_journey_stations(journey: ExtendedJourney) -> List[StationNullId]:
    """Stops of every train in travel order, a stop shared by two trains counted once"""
    stations: List[StationNullId] = []
    seen = set()
    for train in journey.schedule.trains:
        for stop in train.stations:
            key = stop.station_id or stop.name
            if key in seen:
                continue
            seen.add(key)
            stations.append(StationNullId(index=len(stations), id=stop.station_id, name=stop.name))
    return stations


def get_current_train(journey: ExtendedJourney, current_time: datetime = None) -> Optional[ExtendedTrainDetails]:
    current_time = current_time or get_now()
    for train in journey.schedule.trains:
        if not train.train_info:
            continue
        departs_at = get_delayed_time(train.should_depart_at, journey)
        arrives_at = get_delayed_time(train.should_arrive_at, journey)
        if departs_at and arrives_at and departs_at <= current_time <= arrives_at:
            return train
    return None


def calculate_time_based_percentage(journey: ExtendedJourney, current_time: datetime = None) -> float:
    current_time = current_time or get_now()
    start = get_delayed_time(journey.details.departure_time, journey)
    end = get_delayed_time(journey.details.arrival_time, journey)
    if current_time <= start:
        return 0
    if current_time >= end:
        return 100
    return min(100.0, (current_time - start) / (end - start) * 100)


def calculate_journey_percentage(journey: ExtendedJourney, current_time: datetime = None) -> float:
    """
    0-100 progress of a journey in progress.

    The position of the current station among all stops gives the coarse part, the elapsed share
    of the current train adds up to one station's worth on top. Without live position the progress
    is interpolated from the delay shifted start and end of the journey.
    """
    current_time = current_time or get_now()
    current_train = get_current_train(journey, current_time)

    if not current_train:
        end = get_delayed_time(journey.details.arrival_time, journey)
        return 100 if current_time >= end else 0

    if not current_train.train_info.current_station:
        return calculate_time_based_percentage(journey, current_time)

    all_stations = get_all_journey_stations(journey)
    current_id = current_train.train_info.current_station.id
    station_index = next((x.index for x in all_stations if x.id == current_id), -1)
    if station_index == -1:
        return calculate_time_based_percentage(journey, current_time)

    total = len(all_stations)
    station_percentage = station_index / (total - 1) * 100 if total > 1 else 0

    departs_at = get_delayed_time(current_train.should_depart_at, journey)
    arrives_at = get_delayed_time(current_train.should_arrive_at, journey)
    train_duration = (arrives_at - departs_at).total_seconds()
    elapsed = (current_time - departs_at).total_seconds()
    segment_percentage = 0
    if train_duration > 0 and elapsed > 0:
        segment_percentage = min(100.0, elapsed / train_duration * 100)

    return min(100.0, station_percentage + segment_percentage / total)


def is_train_delayed(train: Union[TrainInfo, ExtendedTrainDetails]) -> bool:
    info = train if isinstance(train, TrainInfo) else train.train_info
    return bool(info) and info.status == TrainStatusEnum.DELAYED


def is_train_on_time(train: Union[TrainInfo, ExtendedTrainDetails]) -> bool:
    info = train if isinstance(train, TrainInfo) else train.train_info
    return bool(info) and info.status == TrainStatusEnum.ON_TIME
