import json

import pytest

import nxreach as nr


def test_station_from_dict():
    station = nr.station_from_dict({
        'code': 1130101,
        'name': 'Tokyo',
        'lat': '35.681391',
        'lon': 139.766103,
        'lines': [
            {'code': 11302, 'name': 'Yamanote Line', 'company': 'JR East'},
            {'code': 28001},
        ],
    })

    assert station.code == '1130101'
    assert station.lat == pytest.approx(35.681391)
    assert station.lines[0] == nr.Line('11302', 'Yamanote Line', 'JR East')
    # missing names fall back to the line code
    assert station.lines[1] == nr.Line('28001', '28001', '')


def test_station_from_dict_missing_field():
    with pytest.raises(KeyError):
        nr.station_from_dict({'code': 'A', 'name': 'Alpha', 'lat': 35.0})


@pytest.mark.parametrize("record,expected_time", [
    ({'from': 'A', 'to': 'B', 'line': 'L1', 'time': 4}, 4),
    ({'from': 'A', 'to': 'B', 'line': 'L1', 'time': 4.0}, 4),
    ({'from': 'A', 'to': 'B', 'line': 'L1', 'time': 4.6}, 5),
    ({'from': 'A', 'to': 'B', 'line': 'L1', 'time': 4.5}, 5),
    ({'from': 'A', 'to': 'B', 'line': 'L1', 'time': '3'}, 3),
    ({'from': 'A', 'to': 'B', 'line': 'L1', 'time': None}, None),
    ({'from': 'A', 'to': 'B', 'line': 'L1', 'time': float('nan')}, None),
    ({'from': 'A', 'to': 'B', 'line': 'L1'}, None),
])
def test_connection_from_dict(record, expected_time):
    assert nr.connection_from_dict(record) == nr.Connection('A', 'B', 'L1', expected_time)


def test_origin_group_from_dict():
    group = nr.origin_group_from_dict({'origins': ['A', 'B'], 'timeMinutes': 30})

    assert group == nr.OriginGroup(('A', 'B'), 30)


def test_results_to_response():
    lines = (nr.Line('L1', 'Line One', 'Test Railway'),)
    a = nr.Station('A', 'Alpha', 35.0, 139.0, lines)
    b = nr.Station('B', 'Beta', 35.01, 139.0, lines)
    graph = nr.build_graph([a, b], [nr.Connection('A', 'B', 'L1', 5)])

    results = nr.search_reachable(graph, nr.station_index([a, b]), 'A', 10)
    response = nr.results_to_response(results)

    assert response['count'] == 1
    station_data = response['stations'][0]
    assert station_data['station']['code'] == 'B'
    assert station_data['totalTime'] == 5
    assert station_data['timesFromOrigins'] == {'A': 5}
    assert station_data['routesFromOrigins']['A'] == [{
        'fromCode': 'A',
        'toCode': 'B',
        'from': 'Alpha',
        'to': 'Beta',
        'line': 'Line One',
        'time': 5,
    }]
    json.dumps(response)


def test_result_to_dict_without_route():
    station = nr.Station('A', 'Alpha', 35.0, 139.0)
    data = nr.result_to_dict(nr.SearchResult(station, 7, {'X': 7}))

    assert 'routesFromOrigins' not in data
    assert data['station']['lines'] == []
