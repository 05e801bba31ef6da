# ruff: noqa: F401
"""
NxReach is a Python package for exploring which stations of a rail network can be reached
from one or more origin stations within a time budget.

Key Features:
- Station Graph Creation: NxReach builds a bidirectional NetworkX graph from station and connection records, estimating missing travel times from station coordinates.
- Transfer-Aware Search: Travel times account for the time needed to change lines at interchange stations.
- Multi-Origin Queries: Results from several origins can be combined as a union (reachable from any) or an intersection (reachable from all), and origin groups can be combined with each other.
"""
__version__ = "0.1.0"

from .models import Line
from .models import Station
from .models import Connection
from .models import GraphEdge
from .models import SearchState
from .models import RouteStep
from .models import SearchResult
from .models import OriginGroup

from .loaders import build_graph
from .loaders import station_index
from .loaders import adjacency
from .loaders import graph_to_json
from .loaders import load_stations
from .loaders import load_connections
from .loaders import load_graph
from .loaders import stations_to_gdf

from .routers import search_reachable
from .routers import single_source_transfer_dijkstra

from .accessibility import search_multi_origin
from .accessibility import search_groups

from .transfer import estimate_transfer_time
from .transfer import transfer_time_map

from .travel_time import great_circle_distance
from .travel_time import detect_line_type
from .travel_time import flat_speed_travel_time
from .travel_time import line_type_travel_time

from .functions import find_station_by_name
from .functions import graph_stats
from .functions import search_summary
from .functions import results_to_dataframe
from .functions import reachable_stations_gdf

from .converters import station_from_dict
from .converters import connection_from_dict
from .converters import origin_group_from_dict
from .converters import result_to_dict
from .converters import results_to_response

from .other import set_log_level
