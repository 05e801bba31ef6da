"""Estimation of interchange times at stations."""
from typing import Dict, Iterable

from .models import Station

# (maximum number of lines, minutes) in ascending order
TRANSFER_TIME_STEPS = (
    (2, 3),
    (4, 5),
    (6, 7),
)
LARGE_STATION_TRANSFER_TIME = 10


def estimate_transfer_time(station: Station) -> int:
    """
    Estimates the time in minutes needed to change lines at a station.

    Walking time between platforms grows with the size of the station,
    so the estimate is a step function of the number of lines serving it.

    Parameters
    ----------
    station : Station
        The station where the line change happens.

    Returns
    -------
    int
        3 minutes for up to 2 lines, 5 for up to 4, 7 for up to 6 and
        10 for larger stations.
    """
    line_count = len(station.lines)
    for max_lines, minutes in TRANSFER_TIME_STEPS:
        if line_count <= max_lines:
            return minutes
    return LARGE_STATION_TRANSFER_TIME


def transfer_time_map(stations: Iterable[Station]) -> Dict[str, int]:
    """Maps each station code to its estimated transfer time."""
    return {station.code: estimate_transfer_time(station) for station in stations}
