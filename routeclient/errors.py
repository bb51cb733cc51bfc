#Purpose: Error types for the routing client.
#Configuration and request-construction problems are raised immediately.
#Errors reported by the routing service are NOT raised: they are collected
#into RouteResponse.errors so callers check has_errors().

from typing import Any, Dict, Optional


class RoutingClientError(Exception):
    """Base class for all routing client errors."""
    pass


class InvalidRequestStateError(RoutingClientError):
    """The request combines options the service cannot honour."""
    pass


class ServerError(RoutingClientError):
    """The service answered with a top-level message and nothing more specific."""
    pass


class DetailedError(RoutingClientError):
    """
    Server error carrying the raw error object as a details dict.
    """
    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.details = details or {}


class InvalidArgumentError(RoutingClientError, ValueError):
    pass


class UnsupportedOperationError(RoutingClientError):
    pass


class PointNotFoundError(RoutingClientError):
    """A request point could not be snapped to the road network."""
    def __init__(self, message: str, point_index: int):
        super().__init__(message)
        self.point_index = point_index


class PointOutOfBoundsError(RoutingClientError):
    """A request point lies outside the area covered by the service."""
    def __init__(self, message: str, point_index: int):
        super().__init__(message)
        self.point_index = point_index


class ConnectionNotFoundError(DetailedError):
    """No route connects the requested points."""
    pass


class MaximumNodesExceededError(RoutingClientError):
    NODES_KEY = "max_visited_nodes"

    def __init__(self, message: str, max_visited_nodes: int):
        super().__init__(message)
        self.max_visited_nodes = max_visited_nodes
