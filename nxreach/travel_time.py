"""Geometric estimation of travel times between adjacent stations."""
import math
from typing import Callable, Optional, Tuple, Union

from .models import Line, Station

EARTH_RADIUS_KM = 6371.0

# Speed assumed by the "flat" policy, a compromise for urban rail
DEFAULT_SPEED_KMH = 30
MIN_TRAVEL_TIME = 2
MAX_TRAVEL_TIME = 10

BULLET_TRAIN = "bullet_train"
LIMITED_EXPRESS = "limited_express"
SUBWAY = "subway"
CONVENTIONAL = "conventional"
PRIVATE_RAILWAY = "private_railway"

# Average speed in km/h per line type
LINE_TYPE_SPEEDS = {
    BULLET_TRAIN: 200,
    LIMITED_EXPRESS: 100,
    SUBWAY: 35,
    CONVENTIONAL: 40,
    PRIVATE_RAILWAY: 40,
}

_BULLET_TRAIN_KEYWORDS = ("新幹線", "shinkansen")
_EXPRESS_KEYWORDS = ("特急", "エクスプレス", "express")
_SUBWAY_NAME_KEYWORDS = ("地下鉄", "subway")
_SUBWAY_COMPANY_KEYWORDS = ("メトロ", "地下鉄", "都営", "市営", "市交通局", "metro", "subway")
_JR_KEYWORDS = ("jr", "ｊｒ")

TravelTimePolicy = Callable[[Station, Station, Optional[Line]], int]


def great_circle_distance(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """
    Calculates the great-circle distance between two points with the haversine formula.

    Returns
    -------
    float
        Distance in kilometers.
    """
    d_lat = math.radians(lat2 - lat1)
    d_lon = math.radians(lon2 - lon1)
    a = (
        math.sin(d_lat / 2) ** 2
        + math.cos(math.radians(lat1)) * math.cos(math.radians(lat2)) * math.sin(d_lon / 2) ** 2
    )
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))
    return EARTH_RADIUS_KM * c


def station_distance(station1: Station, station2: Station) -> float:
    """Distance in kilometers between two stations."""
    return great_circle_distance(station1.lat, station1.lon, station2.lat, station2.lon)


def _classify_line(line: Optional[Line]) -> str:
    if line is None:
        return PRIVATE_RAILWAY

    name = line.name.lower()
    company = line.company.lower()

    if any(keyword in name for keyword in _BULLET_TRAIN_KEYWORDS):
        return BULLET_TRAIN
    if any(keyword in name for keyword in _EXPRESS_KEYWORDS):
        return LIMITED_EXPRESS
    if any(keyword in name for keyword in _SUBWAY_NAME_KEYWORDS) or any(
        keyword in company for keyword in _SUBWAY_COMPANY_KEYWORDS
    ):
        return SUBWAY
    if any(keyword in company for keyword in _JR_KEYWORDS):
        return CONVENTIONAL

    return PRIVATE_RAILWAY


def detect_line_type(line: Optional[Line]) -> Tuple[str, int]:
    """
    Guesses the kind of service a line provides from its name and operator.

    Parameters
    ----------
    line : Line or None
        The line to classify. Unknown lines are treated as private railways.

    Returns
    -------
    tuple
        The line type name and its assumed average speed in km/h.
    """
    line_type = _classify_line(line)
    return line_type, LINE_TYPE_SPEEDS[line_type]


def flat_speed_travel_time(station1: Station, station2: Station, line: Optional[Line] = None) -> int:
    """
    Travel time in minutes at a flat 30 km/h, rounded and clamped to 2-10 minutes.
    """
    distance = station_distance(station1, station2)
    minutes = distance / (DEFAULT_SPEED_KMH / 60)
    # round half up
    return max(MIN_TRAVEL_TIME, min(MAX_TRAVEL_TIME, math.floor(minutes + 0.5)))


def line_type_travel_time(station1: Station, station2: Station, line: Optional[Line] = None) -> int:
    """
    Travel time in minutes using the average speed of the line type.

    The result is rounded up and never shorter than 2 minutes.
    """
    _, speed = detect_line_type(line)
    distance = station_distance(station1, station2)
    minutes = distance / (speed / 60)
    return max(MIN_TRAVEL_TIME, math.ceil(minutes))


TRAVEL_TIME_POLICIES = {
    "flat": flat_speed_travel_time,
    "line_type": line_type_travel_time,
}


def resolve_travel_time_policy(policy: Union[str, TravelTimePolicy]) -> TravelTimePolicy:
    """
    Returns the travel time function for a policy name, or the callable itself.

    Raises
    ------
    ValueError
        If ``policy`` is neither a known name nor callable.
    """
    if callable(policy):
        return policy
    try:
        return TRAVEL_TIME_POLICIES[policy]
    except KeyError:
        raise ValueError(
            f"Unknown travel time policy {policy!r}, expected one of {sorted(TRAVEL_TIME_POLICIES)}"
        ) from None
