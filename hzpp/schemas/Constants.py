from enum import Enum, IntEnum
from typing import List


class DiscountEnum(IntEnum):
    NONE = 0
    REGULAR_SINGLE = 11  # one-way tickets only
    REGULAR_RETURN = 12  # return tickets only
    CHILD_AGE_6_TO_12 = 13
    JOURNALISTS = 27
    PENSIONERS_AND_SENIORS = 28
    YOUTH_AGE_TO_26 = 29
    STUDENT = 75


class ClassEnum(IntEnum):
    FIRST = 1
    SECOND = 2


class TrainTypeEnum(IntEnum):
    DIRECT = 0
    ALL = 1


class TripTypeEnum(str, Enum):
    OUTWARD = 'Outward'
    RETURN = 'Return'


class TrainStatusEnum(IntEnum):
    ON_TIME = 0  # "Vlak je redovit"
    WAITING_DEPARTURE = 1  # "Vlak čeka polazak"
    DELAYED = 2  # "Kasni"
    UNKNOWN = 3


class TrainStateEnum(IntEnum):
    ARRIVAL = 0
    DEPARTURE = 1
    FINISHED = 2
    FORMED = 3
    UNKNOWN = 4


class CompositionTypeEnum(IntEnum):
    STARTING_POINT = 0
    DESTINATION = 1
    INTERMEDIATE = 2
    TRANSFER = 3


class TrainFeaturesEnum(IntEnum):
    FIRST_CLASS = 1
    SECOND_CLASS = 2
    FAST_TRAIN = 3
    WHEELCHAIR_ACCESSIBLE = 4
    BICYCLE_TRANSPORT = 5
    PASSENGER_TRAIN = 6
    RESERVATION_POSSIBLE = 7
    RESERVATION_REQUIRED = 8
    COUCH_WAGON = 9
    BED_WAGON = 10
    IC_TRAIN = 11


# image titles on the composition page, text before " - "
feature_map_hr = {
    'Vagoni prvog razreda': TrainFeaturesEnum.FIRST_CLASS,
    'Vagoni drugog razreda': TrainFeaturesEnum.SECOND_CLASS,
    'Brzi vlakovi': TrainFeaturesEnum.FAST_TRAIN,
    'Vagon s mjestima za osobe s invaliditetom': TrainFeaturesEnum.WHEELCHAIR_ACCESSIBLE,
    'Vagon za prijevoz bicikla': TrainFeaturesEnum.BICYCLE_TRANSPORT,
    'Putnički vlak': TrainFeaturesEnum.PASSENGER_TRAIN,
    'Rezervacija moguća': TrainFeaturesEnum.RESERVATION_POSSIBLE,
    'Rezervacija obavezna': TrainFeaturesEnum.RESERVATION_REQUIRED,
    'Vagon s ležajevima (kušet-vagon)': TrainFeaturesEnum.COUCH_WAGON,
    'Vagon s posteljama (vagon za spavanje)': TrainFeaturesEnum.BED_WAGON,
    'IC vlakovi': TrainFeaturesEnum.IC_TRAIN,
}

feature_map_en = {
    'First class coaches': TrainFeaturesEnum.FIRST_CLASS,
    'Second class coaches': TrainFeaturesEnum.SECOND_CLASS,
    'Fast trains': TrainFeaturesEnum.FAST_TRAIN,
    'Coach with seats for persons with disabilities': TrainFeaturesEnum.WHEELCHAIR_ACCESSIBLE,
    'Coach for bicycle transport': TrainFeaturesEnum.BICYCLE_TRANSPORT,
    'Passenger train': TrainFeaturesEnum.PASSENGER_TRAIN,
    'Reservation possible': TrainFeaturesEnum.RESERVATION_POSSIBLE,
    'Reservation required': TrainFeaturesEnum.RESERVATION_REQUIRED,
    'Couchette coach': TrainFeaturesEnum.COUCH_WAGON,
    'Sleeping car': TrainFeaturesEnum.BED_WAGON,
    'IC trains': TrainFeaturesEnum.IC_TRAIN,
}


def features_to_enum(features: List[str]) -> List[TrainFeaturesEnum]:
    """Map image titles (Croatian or English) onto feature flags, dropping unknown ones."""
    lookup = {k.lower(): v for k, v in {**feature_map_hr, **feature_map_en}.items()}
    result = []
    for feature in features:
        if not feature:
            continue
        value = lookup.get(feature.strip().lower())
        if value is not None and value not in result:
            result.append(value)
    return result
