"""Transfer-aware routing algorithms for station graphs."""

from heapq import heappop, heappush
from itertools import count
from typing import Dict, List, Mapping, Optional, Tuple

from networkx import MultiDiGraph

from .functions import _line_names, _reconstruct_route
from .models import SearchResult, SearchState, Station
from .other import logger
from .transfer import estimate_transfer_time


def _segment_time(station: Station, current_line: Optional[str], edge_line: str, weight: int) -> int:
    """
    Time of a segment leaving ``station`` along ``edge_line``.
    Used in the transfer-aware Dijkstra algorithm.

    Boarding at the origin (``current_line`` is None) or staying on the same
    line is free; changing lines adds the station's transfer time.
    """
    if current_line is None or current_line == edge_line:
        return weight
    return weight + estimate_transfer_time(station)


def single_source_transfer_dijkstra(
    graph: MultiDiGraph,
    station_index: Mapping[str, Station],
    source: str,
    max_minutes: int,
) -> Tuple[
    Dict[str, int],
    Dict[str, SearchState],
    Dict[SearchState, Tuple[Optional[SearchState], int]],
]:
    """
    Computes the shortest travel times from a source station to every station
    reachable within ``max_minutes``, taking line changes into account.

    Parameters
    ----------
    graph : networkx.MultiDiGraph
        Station graph produced by ``build_graph``.
    station_index : mapping
        Station code to Station, used for transfer time estimates.
    source : str
        Code of the origin station.
    max_minutes : int
        Time budget in minutes.

    Returns
    -------
    tuple
        A tuple containing three dictionaries:
            - station_times: station code -> shortest travel time (the source maps to 0).
            - best_states: station code -> search state that achieved the shortest time.
            - predecessors: search state -> (previous state, segment time); the
              source state has no previous state.

    Implementation
    --------------
    The search runs over ``(station, line)`` states instead of bare stations,
    because the cost of leaving a station depends on the line the traveller
    arrived on. Heap entries are ``(time, insertion counter, state)``; outdated
    entries are skipped when popped (lazy deletion). Among states reaching a
    station in the same time, the first one relaxed is kept for the route.

    See Also
    --------
    nxreach.routers.search_reachable : Reachable stations with reconstructed routes.
    """
    source_state = SearchState(source, None)
    state_times = {source_state: 0}
    station_times = {source: 0}
    best_states = {source: source_state}
    predecessors = {source_state: (None, 0)}

    counter = count()
    queue = [(0, next(counter), source_state)]

    while queue:
        current_time, _, state = heappop(queue)

        # A better result for this exact state was already found
        if current_time > state_times.get(state, float("inf")):
            continue
        if current_time > max_minutes:
            continue

        station = station_index.get(state.station)
        if station is None:
            continue

        for _, neighbor, line, data in graph.out_edges(state.station, keys=True, data=True):
            segment_time = _segment_time(station, state.line, line, data["weight"])
            new_time = current_time + segment_time
            if new_time > max_minutes:
                continue

            new_state = SearchState(neighbor, line)
            if new_time < state_times.get(new_state, float("inf")):
                state_times[new_state] = new_time
                predecessors[new_state] = (state, segment_time)

                if new_time < station_times.get(neighbor, float("inf")):
                    station_times[neighbor] = new_time
                    best_states[neighbor] = new_state

                heappush(queue, (new_time, next(counter), new_state))

    return station_times, best_states, predecessors


def search_reachable(
    graph: MultiDiGraph,
    station_index: Mapping[str, Station],
    origin: str,
    max_minutes: int,
) -> List[SearchResult]:
    """
    Finds the stations reachable from one origin within a time budget.

    Parameters
    ----------
    graph : networkx.MultiDiGraph
        Station graph produced by ``build_graph``.
    station_index : mapping
        Station code to Station.
    origin : str
        Code of the origin station. An unknown code behaves like an isolated
        station and yields no results.
    max_minutes : int
        Time budget in minutes. Zero or negative budgets yield no results.

    Returns
    -------
    list of SearchResult
        One result per reached station other than the origin, sorted by
        travel time. Each result has a single entry in ``times_from_origins``
        and, when a route exists, in ``routes_from_origins``.

    Examples
    --------
    >>> results = nr.search_reachable(G, index, "A", 20)
    >>> [(r.station.code, r.total_time) for r in results]
    [('B', 5), ('C', 9)]
    """
    if origin not in graph:
        logger.debug(f"Origin {origin} is not in the graph, nothing is reachable")
        return []
    if max_minutes <= 0:
        return []

    station_times, best_states, predecessors = single_source_transfer_dijkstra(
        graph, station_index, origin, max_minutes
    )
    line_names = _line_names(graph, station_index)

    results = []
    for code, total_time in station_times.items():
        station = station_index.get(code)
        if code == origin or station is None:
            continue

        route = _reconstruct_route(best_states[code], predecessors, station_index, line_names)
        results.append(
            SearchResult(
                station=station,
                total_time=total_time,
                times_from_origins={origin: total_time},
                routes_from_origins={origin: route} if route else None,
            )
        )

    results.sort(key=lambda result: result.total_time)
    logger.debug(f"{len(results)} stations reachable from {origin} within {max_minutes} minutes")

    return results
