from typing import Dict, Iterable, List, Mapping, Optional, Tuple

import geopandas as gpd
import networkx as nx
import numpy as np
import pandas as pd
from shapely.geometry import Point

from .models import RouteStep, SearchResult, SearchState, Station


def _line_names(graph: nx.MultiDiGraph, station_index: Mapping[str, Station]) -> Dict[str, str]:
    """
    Maps line codes to display names, preferring the catalogue stored on the graph.
    """
    catalogue = graph.graph.get("lines")
    if catalogue:
        return {code: line.name for code, line in catalogue.items()}

    names = {}
    for station in station_index.values():
        for line in station.lines:
            names.setdefault(line.code, line.name)
    return names


def _reconstruct_route(
    state: SearchState,
    predecessors: Dict[SearchState, Tuple[Optional[SearchState], int]],
    station_index: Mapping[str, Station],
    line_names: Mapping[str, str],
) -> Tuple[RouteStep, ...]:
    """
    Reconstructs the route leading to ``state`` by walking predecessor links
    back to the origin, whose predecessor is None.
    """
    steps: List[RouteStep] = []
    current = state

    while current is not None:
        previous, segment_time = predecessors[current]
        if previous is None:
            break

        from_station = station_index.get(previous.station)
        to_station = station_index.get(current.station)
        if from_station is not None and to_station is not None:
            steps.append(
                RouteStep(
                    from_code=from_station.code,
                    to_code=to_station.code,
                    from_name=from_station.name,
                    to_name=to_station.name,
                    line_name=line_names.get(current.line, current.line),
                    time=segment_time,
                )
            )
        current = previous

    steps.reverse()
    return tuple(steps)


def find_station_by_name(station_index: Mapping[str, Station], name: str) -> Optional[Station]:
    """Returns the first station with the given display name, or None."""
    for station in station_index.values():
        if station.name == name:
            return station
    return None


def graph_stats(graph: nx.MultiDiGraph) -> dict:
    """
    Calculates basic statistics of a station graph.

    Parameters
    ----------
    graph : networkx.MultiDiGraph
        Graph produced by ``build_graph``.

    Returns
    -------
    dict
        ``node_count``, ``edge_count`` (undirected connections, i.e. directed
        edges halved), ``avg_degree``, ``max_degree`` and ``isolated_nodes``.
    """
    degrees = np.array([graph.out_degree(node) for node in graph.nodes], dtype=int)
    node_count = len(degrees)
    if node_count == 0:
        return {
            "node_count": 0,
            "edge_count": 0,
            "avg_degree": 0.0,
            "max_degree": 0,
            "isolated_nodes": 0,
        }

    return {
        "node_count": node_count,
        "edge_count": int(degrees.sum()) // 2,
        "avg_degree": float(degrees.mean()),
        "max_degree": int(degrees.max()),
        "isolated_nodes": int((degrees == 0).sum()),
    }


def search_summary(results: Iterable[SearchResult]) -> dict:
    """
    Summarizes search results.

    Returns
    -------
    dict
        ``total_count``, ``average_time`` (rounded to whole minutes),
        ``min_time`` and ``max_time``. All zero for an empty result.
    """
    times = np.array([result.total_time for result in results])
    if times.size == 0:
        return {"total_count": 0, "average_time": 0, "min_time": 0, "max_time": 0}

    return {
        "total_count": int(times.size),
        "average_time": int(np.floor(times.mean() + 0.5)),
        "min_time": int(times.min()),
        "max_time": int(times.max()),
    }


def results_to_dataframe(results: Iterable[SearchResult]) -> pd.DataFrame:
    """
    Flattens search results into one row per (origin, station) pair.

    Returns
    -------
    pandas.DataFrame
        Columns:
            - origin: code of the origin station.
            - station_code, station_name: the reached station.
            - total_time: the combined time reported for the station.
            - travel_time: the time from this particular origin.
            - segments: number of route steps from this origin (0 without a route).
    """
    columns = ["origin", "station_code", "station_name", "total_time", "travel_time", "segments"]
    rows = []
    for result in results:
        routes = result.routes_from_origins or {}
        for origin, travel_time in result.times_from_origins.items():
            rows.append(
                {
                    "origin": origin,
                    "station_code": result.station.code,
                    "station_name": result.station.name,
                    "total_time": result.total_time,
                    "travel_time": travel_time,
                    "segments": len(routes.get(origin, ())),
                }
            )

    return pd.DataFrame(rows, columns=columns)


def reachable_stations_gdf(results: Iterable[SearchResult]) -> gpd.GeoDataFrame:
    """
    Creates a point GeoDataFrame of the reached stations.

    Returns
    -------
    geopandas.GeoDataFrame
        Columns ``code``, ``name``, ``total_time`` and point geometry in EPSG:4326.
    """
    points_data = [
        {
            "code": result.station.code,
            "name": result.station.name,
            "total_time": result.total_time,
            "geometry": Point(result.station.lon, result.station.lat),
        }
        for result in results
    ]

    return gpd.GeoDataFrame(
        points_data,
        columns=["code", "name", "total_time", "geometry"],
        geometry="geometry",
        crs="EPSG:4326",
    )
