"""Build the station graph from station and connection records."""
import json
import math
import os
import warnings
from datetime import datetime, timezone
from typing import Dict, Iterable, List, Mapping, Sequence, Tuple, Union

import geopandas as gpd
import networkx as nx
import pandas as pd

from .converters import connection_from_dict, station_from_dict
from .models import Connection, GraphEdge, Line, Station
from .other import logger
from .travel_time import TravelTimePolicy, resolve_travel_time_policy


def _is_valid_minutes(minutes) -> bool:
    # Negative or non-finite weights break the label-setting search
    return minutes is not None and math.isfinite(minutes) and minutes >= 0


def station_index(stations: Iterable[Station]) -> Dict[str, Station]:
    """Maps station codes to stations."""
    return {station.code: station for station in stations}


def line_catalogue(stations: Iterable[Station]) -> Dict[str, Line]:
    """
    Collects every line serving the given stations, keyed by line code.
    The first membership seen for a code wins.
    """
    lines = {}
    for station in stations:
        for line in station.lines:
            lines.setdefault(line.code, line)
    return lines


def _add_edge_once(graph: nx.MultiDiGraph, from_code, to_code, line_code, minutes):
    """
    Adds a directed edge keyed by line code unless that (target, line) pair already exists.
    """
    if graph.has_edge(from_code, to_code, key=line_code):
        return False
    graph.add_edge(from_code, to_code, key=line_code, line=line_code, weight=minutes)
    return True


def build_graph(
    stations: Sequence[Station],
    connections: Iterable[Connection],
    travel_time: Union[str, TravelTimePolicy] = "flat",
) -> nx.MultiDiGraph:
    """
    Creates a frozen, bidirectional station graph.

    Parameters
    ----------
    stations : sequence of Station
        All known stations. Each becomes a node, connected or not.
    connections : iterable of Connection
        Links between stations. Links referencing unknown stations, or with a
        negative or non-finite travel time, are skipped.
    travel_time : str or callable, optional
        Policy used for connections without an explicit time: ``"flat"``
        (default), ``"line_type"`` or a callable
        ``(station_a, station_b, line) -> minutes``.

    Returns
    -------
    networkx.MultiDiGraph
        Frozen graph. Nodes are station codes carrying the ``station``,
        ``x`` and ``y`` attributes. Edges are keyed by line code and carry
        ``line`` and ``weight`` (minutes). ``graph.graph["lines"]`` maps line
        codes to Line records.

    Examples
    --------
    >>> G = nr.build_graph(stations, connections)
    >>> results = nr.search_reachable(G, nr.station_index(stations), "A", 30)
    """
    estimate = resolve_travel_time_policy(travel_time)
    index = station_index(stations)
    lines = line_catalogue(stations)

    G = nx.MultiDiGraph(lines=lines)

    # Isolated stations stay visible as nodes without edges
    for station in stations:
        G.add_node(station.code, station=station, x=station.lon, y=station.lat)

    skipped = 0
    for connection in connections:
        source = index.get(connection.source)
        target = index.get(connection.target)
        if source is None or target is None:
            skipped += 1
            logger.debug(
                f"Skipping connection {connection.source} - {connection.target}: unknown station"
            )
            continue

        if connection.time is not None:
            minutes = connection.time
        else:
            minutes = estimate(source, target, lines.get(connection.line))

        if not _is_valid_minutes(minutes):
            skipped += 1
            logger.debug(
                f"Skipping connection {connection.source} - {connection.target}: "
                f"invalid travel time {minutes!r}"
            )
            continue

        _add_edge_once(G, source.code, target.code, connection.line, minutes)
        _add_edge_once(G, target.code, source.code, connection.line, minutes)

    G.graph["skipped_connections"] = skipped
    logger.info(
        f"Station graph created. Nodes: {G.number_of_nodes()}, Edges: {G.number_of_edges()}, "
        f"skipped connections: {skipped}"
    )

    return nx.freeze(G)


def adjacency(graph: nx.MultiDiGraph) -> Dict[str, List[GraphEdge]]:
    """
    Returns the graph as a mapping of station code to outgoing edges.
    Every node is present, including isolated ones.
    """
    return {
        node: [
            GraphEdge(target=v, line=key, minutes=data["weight"])
            for _, v, key, data in graph.out_edges(node, keys=True, data=True)
        ]
        for node in graph.nodes
    }


def graph_to_json(graph: nx.MultiDiGraph) -> dict:
    """
    Serializes the graph to a JSON-ready dict with generation metadata.

    The ``edge_count`` counts directed edges.
    """
    return {
        "generated_at": datetime.now(timezone.utc).isoformat(),
        "node_count": graph.number_of_nodes(),
        "edge_count": graph.number_of_edges(),
        "graph": {
            node: [
                {"station": edge.target, "time": edge.minutes, "line": edge.line}
                for edge in edges
            ]
            for node, edges in adjacency(graph).items()
        },
    }


def _read_records(path: str, key: str) -> list:
    """
    Reads a list of records from a JSON file shaped either as a plain list
    or as ``{key: [...]}``.
    """
    if not os.path.isfile(path):
        raise FileNotFoundError(f"{path} not found")

    with open(path, encoding="utf-8") as f:
        data = json.load(f)

    if isinstance(data, Mapping):
        return data[key]
    return data


def load_stations(path: str) -> List[Station]:
    """
    Loads stations from a stations.json file.

    Parameters
    ----------
    path : str
        Path to a JSON file containing ``{"stations": [...]}`` or a plain list
        of station records.

    Returns
    -------
    list of Station
    """
    return [station_from_dict(record) for record in _read_records(path, "stations")]


def load_connections(path: str) -> List[Connection]:
    """
    Loads connections from a JSON or CSV file.

    JSON files contain ``{"connections": [...]}`` or a plain list; CSV files
    need ``from``, ``to`` and ``line`` columns and may have a ``time`` column.
    Empty times are estimated when the graph is built.
    """
    if path.lower().endswith(".csv"):
        if not os.path.isfile(path):
            raise FileNotFoundError(f"{path} not found")
        connections_df = pd.read_csv(path, dtype={"from": str, "to": str, "line": str})
        records = connections_df.to_dict("records")
    else:
        records = _read_records(path, "connections")

    return [connection_from_dict(record) for record in records]


def load_graph(
    stations_path: str,
    connections_path: str,
    travel_time: Union[str, TravelTimePolicy] = "flat",
) -> Tuple[nx.MultiDiGraph, Dict[str, Station]]:
    """
    Loads stations and connections from disk and builds the station graph.

    Parameters
    ----------
    stations_path : str
        Path to stations.json.
    connections_path : str
        Path to a JSON or CSV connections file.
    travel_time : str or callable, optional
        Travel time policy for connections without explicit times.

    Returns
    -------
    tuple
        The frozen graph and the station index (code -> Station).
    """
    stations = load_stations(stations_path)
    connections = load_connections(connections_path)

    logger.info(f"Loaded {len(stations)} stations and {len(connections)} connections")

    graph = build_graph(stations, connections, travel_time=travel_time)
    if graph.graph["skipped_connections"]:
        warnings.warn(
            f"{graph.graph['skipped_connections']} connections reference unknown stations "
            f"or have invalid travel times and were skipped"
        )

    return graph, station_index(stations)


def stations_to_gdf(stations: Iterable[Station]) -> gpd.GeoDataFrame:
    """
    Creates a GeoDataFrame of station points.

    Returns
    -------
    gpd.GeoDataFrame
        Columns ``code``, ``name``, ``line_count`` and point geometry in EPSG:4326.
    """
    stations_df = pd.DataFrame(
        [
            {
                "code": station.code,
                "name": station.name,
                "line_count": len(station.lines),
                "lat": station.lat,
                "lon": station.lon,
            }
            for station in stations
        ],
        columns=["code", "name", "line_count", "lat", "lon"],
    )
    stations_gdf = gpd.GeoDataFrame(
        stations_df,
        geometry=gpd.points_from_xy(stations_df.lon, stations_df.lat),
        crs="epsg:4326",
    )
    return stations_gdf
