"""Conversion between plain dictionaries and package records."""
import math
from typing import Any, Dict, Iterable, List

from .models import Connection, Line, OriginGroup, RouteStep, SearchResult, Station


def line_from_dict(data: Dict[str, Any]) -> Line:
    """Creates a Line from a ``{"code", "name", "company"}`` mapping."""
    return Line(
        code=str(data["code"]),
        name=data.get("name", str(data["code"])),
        company=data.get("company", ""),
    )


def station_from_dict(data: Dict[str, Any]) -> Station:
    """Creates a Station from a record of stations.json.
    """
    return Station(
        code=str(data["code"]),
        name=data["name"],
        lat=float(data["lat"]),
        lon=float(data["lon"]),
        lines=tuple(line_from_dict(line) for line in data.get("lines", [])),
    )


def connection_from_dict(data: Dict[str, Any]) -> Connection:
    """
    Creates a Connection from a ``{"from", "to", "line", "time"}`` mapping.

    A missing, null or NaN ``time`` leaves the travel time to be estimated.
    Fractional times are rounded half up to whole minutes.
    """
    time = data.get("time")
    if time is not None and isinstance(time, float) and math.isnan(time):
        time = None

    return Connection(
        source=str(data["from"]),
        target=str(data["to"]),
        line=str(data["line"]),
        time=math.floor(float(time) + 0.5) if time is not None else None,
    )


def route_step_to_dict(step: RouteStep) -> Dict[str, Any]:
    return {
        "fromCode": step.from_code,
        "toCode": step.to_code,
        "from": step.from_name,
        "to": step.to_name,
        "line": step.line_name,
        "time": step.time,
    }


def station_to_dict(station: Station) -> Dict[str, Any]:
    return {
        "code": station.code,
        "name": station.name,
        "lat": station.lat,
        "lon": station.lon,
        "lines": [
            {"code": line.code, "name": line.name, "company": line.company}
            for line in station.lines
        ],
    }


def result_to_dict(result: SearchResult) -> Dict[str, Any]:
    """Converts a search result to the JSON-ready shape served to clients."""
    data = {
        "station": station_to_dict(result.station),
        "totalTime": result.total_time,
        "timesFromOrigins": dict(result.times_from_origins),
    }
    if result.routes_from_origins is not None:
        data["routesFromOrigins"] = {
            origin: [route_step_to_dict(step) for step in route]
            for origin, route in result.routes_from_origins.items()
        }
    return data


def results_to_response(results: Iterable[SearchResult]) -> Dict[str, Any]:
    """Wraps search results as ``{"stations": [...], "count": n}``."""
    stations: List[Dict[str, Any]] = [result_to_dict(result) for result in results]
    return {"stations": stations, "count": len(stations)}


def origin_group_from_dict(data: Dict[str, Any]) -> OriginGroup:
    """Creates an OriginGroup from a ``{"origins": [...], "timeMinutes": n}`` mapping."""
    return OriginGroup(
        origins=tuple(str(origin) for origin in data["origins"]),
        max_minutes=int(data["timeMinutes"]),
    )
