"""An actor engine with restarting processes, an event stream, request/response and cluster data types."""

__version__ = "0.1.0"