"""Records shared by the graph builder and the reachability search."""
from dataclasses import dataclass, field
from typing import Dict, NamedTuple, Optional, Tuple


@dataclass(frozen=True)
class Line:
    """A line serving a station: code, display name and operating company."""
    code: str
    name: str
    company: str = ""


@dataclass(frozen=True)
class Station:
    """
    A station with its coordinates and the lines serving it.

    Stations are never mutated after loading; graphs and search results
    hold references to the same instances.
    """
    code: str
    name: str
    lat: float
    lon: float
    lines: Tuple[Line, ...] = ()

    @property
    def line_codes(self) -> Tuple[str, ...]:
        return tuple(line.code for line in self.lines)


@dataclass(frozen=True)
class Connection:
    """
    Undirected link between two stations along one line.

    ``time`` is the travel time in minutes; ``None`` means it has to be
    estimated from the station coordinates when the graph is built.
    """
    source: str
    target: str
    line: str
    time: Optional[int] = None


@dataclass(frozen=True)
class GraphEdge:
    target: str
    line: str
    minutes: int


class SearchState(NamedTuple):
    """Station plus the line currently ridden; ``line`` is None at the origin."""
    station: str
    line: Optional[str]


@dataclass(frozen=True)
class RouteStep:
    """One leg of a route. ``time`` includes the transfer penalty paid to board it."""
    from_code: str
    to_code: str
    from_name: str
    to_name: str
    line_name: str
    time: int


@dataclass
class SearchResult:
    """
    A reachable station and how long it takes to get there.

    ``times_from_origins`` and ``routes_from_origins`` are keyed by origin
    station code. ``routes_from_origins`` is None when no route is attached.
    """
    station: Station
    total_time: int
    times_from_origins: Dict[str, int] = field(default_factory=dict)
    routes_from_origins: Optional[Dict[str, Tuple[RouteStep, ...]]] = None


@dataclass(frozen=True)
class OriginGroup:
    """Origins combined with OR semantics under a shared time budget."""
    origins: Tuple[str, ...]
    max_minutes: int
