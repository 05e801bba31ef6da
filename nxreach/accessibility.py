"""Tools for combining reachability searches from several origins"""

import multiprocessing as mp
import time
from multiprocessing.pool import ThreadPool
from typing import Dict, Iterable, List, Mapping, Optional, Sequence

from networkx import MultiDiGraph

from .models import OriginGroup, SearchResult, Station
from .other import logger
from .routers import search_reachable

SEARCH_MODES = ("or", "and")

# Use half of the available CPU logical cores
DEFAULT_NUM_WORKERS = max(1, mp.cpu_count() // 2)


def _search_origins_parallel(
    graph: MultiDiGraph,
    station_index: Mapping[str, Station],
    origins: Sequence[str],
    max_minutes: int,
    num_workers: Optional[int] = None,
) -> List[List[SearchResult]]:
    """
    Runs one search per origin and returns the results in the order of ``origins``.

    Searches share the frozen graph by reference, so they run on threads
    rather than processes. A single origin is searched without a pool.
    """
    tasks = [(graph, station_index, origin, max_minutes) for origin in origins]
    if len(tasks) <= 1:
        return [search_reachable(*task) for task in tasks]

    num_workers = min(len(tasks), num_workers or DEFAULT_NUM_WORKERS)
    time_start = time.perf_counter()

    with ThreadPool(processes=num_workers) as pool:
        results = pool.starmap(search_reachable, tasks)

    logger.debug(
        f"Searched {len(tasks)} origins using {num_workers} workers "
        f"in {time.perf_counter() - time_start:.3f} s"
    )
    return results


def _merge_origin_results(
    origins: Sequence[str], results_per_origin: Iterable[List[SearchResult]]
) -> Dict[str, SearchResult]:
    """
    Merges per-origin results by station code, keeping the shortest time
    and accumulating the times and routes of every origin.
    """
    merged: Dict[str, SearchResult] = {}

    for origin, results in zip(origins, results_per_origin):
        for result in results:
            code = result.station.code
            existing = merged.get(code)

            if existing is None:
                merged[code] = SearchResult(
                    station=result.station,
                    total_time=result.total_time,
                    times_from_origins={origin: result.total_time},
                    routes_from_origins=(
                        dict(result.routes_from_origins) if result.routes_from_origins else None
                    ),
                )
                continue

            existing.times_from_origins[origin] = result.total_time
            existing.total_time = min(existing.total_time, result.total_time)
            if result.routes_from_origins:
                if existing.routes_from_origins is None:
                    existing.routes_from_origins = {}
                existing.routes_from_origins.update(result.routes_from_origins)

    return merged


def _exclude_and_sort(results: Iterable[SearchResult], excluded: set) -> List[SearchResult]:
    filtered = [result for result in results if result.station.code not in excluded]
    filtered.sort(key=lambda result: result.total_time)
    return filtered


def search_multi_origin(
    graph: MultiDiGraph,
    station_index: Mapping[str, Station],
    origins: Iterable[str],
    max_minutes: int,
    mode: str = "or",
    num_workers: Optional[int] = None,
) -> List[SearchResult]:
    """
    Finds the stations reachable from several origins within a time budget.

    Parameters
    ----------
    graph : networkx.MultiDiGraph
        Station graph produced by ``build_graph``.
    station_index : mapping
        Station code to Station.
    origins : iterable of str
        Origin station codes. Duplicates are searched once. A single code
        may be passed as a plain string.
    max_minutes : int
        Time budget in minutes, applied to every origin.
    mode : str, optional
        ``"or"`` (default) keeps stations reachable from any origin and reports
        the shortest time; ``"and"`` keeps stations reachable from every origin
        and reports the longest of their times.
    num_workers : int, optional
        Number of threads used for the per-origin searches.

    Returns
    -------
    list of SearchResult
        Results sorted by total time. Origins never appear in the results.
        ``times_from_origins`` and ``routes_from_origins`` hold one entry per
        origin that reached the station.

    Raises
    ------
    ValueError
        If ``mode`` is not ``"or"`` or ``"and"``.

    See Also
    --------
    nxreach.routers.search_reachable : Single origin search.
    nxreach.accessibility.search_groups : AND-combination of OR-combined origin groups.
    """
    if mode not in SEARCH_MODES:
        raise ValueError(f"The search mode must be one of {SEARCH_MODES}, got {mode!r}.")

    if isinstance(origins, str):
        origins = [origins]

    # Keep the first occurrence order of each origin
    origins = list(dict.fromkeys(origins))
    if not origins:
        return []

    results_per_origin = _search_origins_parallel(
        graph, station_index, origins, max_minutes, num_workers=num_workers
    )
    merged = _merge_origin_results(origins, results_per_origin)

    if mode == "and":
        # Reachable from all origins; the slowest origin governs
        combined = [
            result for result in merged.values()
            if len(result.times_from_origins) == len(origins)
        ]
        for result in combined:
            result.total_time = max(result.times_from_origins.values())
    else:
        combined = list(merged.values())

    return _exclude_and_sort(combined, set(origins))


def search_groups(
    graph: MultiDiGraph,
    station_index: Mapping[str, Station],
    groups: Sequence[OriginGroup],
    num_workers: Optional[int] = None,
) -> List[SearchResult]:
    """
    Finds the stations reachable from every origin group.

    Each group is searched in ``"or"`` mode with its own time budget. A
    station is kept only if every group reaches it; its total time is the
    longest of the per-group times.

    Parameters
    ----------
    graph : networkx.MultiDiGraph
        Station graph produced by ``build_graph``.
    station_index : mapping
        Station code to Station.
    groups : sequence of OriginGroup
        The origin groups, in order. For duplicate origin codes across groups
        the times and routes of the later group win.
    num_workers : int, optional
        Number of threads used for the per-origin searches of each group.

    Returns
    -------
    list of SearchResult
        Results sorted by total time, excluding every origin of every group.
        With a single group, that group's result is returned as is.
    """
    if not groups:
        return []

    group_results = [
        search_multi_origin(
            graph, station_index, group.origins, group.max_minutes,
            mode="or", num_workers=num_workers,
        )
        for group in groups
    ]

    if len(groups) == 1:
        return group_results[0]

    by_code = [{result.station.code: result for result in results} for results in group_results]
    common_codes = set(by_code[0]).intersection(*by_code[1:])

    combined = []
    # Iterate the first group in result order for a deterministic output
    for code in (result.station.code for result in group_results[0]):
        if code not in common_codes:
            continue

        per_group = [results[code] for results in by_code]
        times_from_origins = {}
        routes_from_origins = {}
        for result in per_group:
            times_from_origins.update(result.times_from_origins)
            if result.routes_from_origins:
                routes_from_origins.update(result.routes_from_origins)

        combined.append(
            SearchResult(
                station=per_group[0].station,
                total_time=max(result.total_time for result in per_group),
                times_from_origins=times_from_origins,
                routes_from_origins=routes_from_origins or None,
            )
        )

    all_origins = {origin for group in groups for origin in group.origins}
    return _exclude_and_sort(combined, all_origins)
