import pytest

import nxreach as nr


def _station(code, *line_codes, lat=35.0, lon=139.0):
    lines = tuple(nr.Line(c, f"Line {c}", "Test Railway") for c in line_codes)
    return nr.Station(code, f"Station {code}", lat, lon, lines)


@pytest.fixture(scope='module')
def stations():
    return [
        _station('A', 'L1', lon=139.0),
        _station('B', 'L1', 'L2', lon=139.01),
        _station('C', 'L2', lon=139.02),
        _station('D'),
    ]


@pytest.fixture(scope='module')
def graph(stations):
    connections = [
        nr.Connection('A', 'B', 'L1', 5),
        nr.Connection('B', 'C', 'L2', 4),
    ]
    return nr.build_graph(stations, connections)


@pytest.fixture(scope='module')
def results(graph, stations):
    return nr.search_multi_origin(graph, nr.station_index(stations), ['A', 'C'], 20)


def test_graph_stats(graph):
    stats = nr.graph_stats(graph)

    assert stats == {
        'node_count': 4,
        'edge_count': 2,
        'avg_degree': 1.0,
        'max_degree': 2,
        'isolated_nodes': 1,
    }


def test_graph_stats_empty():
    stats = nr.graph_stats(nr.build_graph([], []))

    assert stats['node_count'] == 0
    assert stats['avg_degree'] == 0.0


def test_find_station_by_name(stations):
    index = nr.station_index(stations)

    assert nr.find_station_by_name(index, 'Station C') is stations[2]
    assert nr.find_station_by_name(index, 'Nowhere') is None


def test_search_summary():
    station = _station('X')
    results = [nr.SearchResult(station, time) for time in (5, 6, 12)]

    # mean of 23 / 3 minutes rounds to 8
    assert nr.search_summary(results) == {
        'total_count': 3,
        'average_time': 8,
        'min_time': 5,
        'max_time': 12,
    }


def test_search_summary_rounds_half_up():
    station = _station('X')
    results = [nr.SearchResult(station, 5), nr.SearchResult(station, 6)]

    assert nr.search_summary(results)['average_time'] == 6


def test_search_summary_empty():
    assert nr.search_summary([]) == {
        'total_count': 0,
        'average_time': 0,
        'min_time': 0,
        'max_time': 0,
    }


def test_results_to_dataframe(results):
    df = nr.results_to_dataframe(results)

    assert list(df.columns) == [
        'origin', 'station_code', 'station_name', 'total_time', 'travel_time', 'segments'
    ]
    b_rows = df[df['station_code'] == 'B'].set_index('origin')
    assert b_rows.loc['A', 'travel_time'] == 5
    assert b_rows.loc['C', 'travel_time'] == 4
    assert (b_rows['total_time'] == 4).all()
    assert (b_rows['segments'] == 1).all()


def test_results_to_dataframe_empty():
    df = nr.results_to_dataframe([])

    assert df.empty
    assert 'travel_time' in df.columns


def test_reachable_stations_gdf(results):
    gdf = nr.reachable_stations_gdf(results)

    assert list(gdf['code']) == ['B']
    assert gdf.crs.to_epsg() == 4326
    assert gdf.geometry.iloc[0].x == pytest.approx(139.01)
    assert gdf.geometry.iloc[0].y == pytest.approx(35.0)
