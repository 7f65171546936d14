"""HTTP surface of the tracker."""

from cctracker.server.http import TrackerServer, format_request, parse_query

__all__ = ["TrackerServer", "format_request", "parse_query"]
