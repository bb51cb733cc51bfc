#Marks routeclient as a package.
#Re-exports the public API (RoutingWebClient, RouteRequest, CustomModel ...)
#so callers import from routeclient without knowing internal file names.
#No business logic.

from .config import ClientSettings, configure_logging, load_settings
from .custom_model import (
    CustomModel,
    JsonFeature,
    JsonFeatureCollection,
    Keyword,
    Op,
    Polygon,
    Statement,
)
from .errors import RoutingClientError
from .hints import Hints
from .models import GeoPoint, Instruction, ResponsePath, RouteRequest, RouteResponse
from .response_parser import parse_response, read_errors
from .transport import HttpTransport, PreparedCall
from .web_client import CLIENT_VERSION as __version__
from .web_client import RoutingWebClient

__all__ = [
    "ClientSettings",
    "configure_logging",
    "load_settings",
    "CustomModel",
    "JsonFeature",
    "JsonFeatureCollection",
    "Keyword",
    "Op",
    "Polygon",
    "Statement",
    "RoutingClientError",
    "Hints",
    "GeoPoint",
    "Instruction",
    "ResponsePath",
    "RouteRequest",
    "RouteResponse",
    "parse_response",
    "read_errors",
    "HttpTransport",
    "PreparedCall",
    "RoutingWebClient",
]
