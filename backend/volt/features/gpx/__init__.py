"""
GPX file handling module.

Usage:
    from volt.features.gpx import GPXParserService, TrackPoint, build_gpx

Components:
- GPXParserService: Parse GPX files into cleaned TrackPoints
- TrackPoint: (lat, lon, ele, time) point used across the app
- GPXParseError: Parse failure with a client-facing code
- build_gpx: Render points back to a GPX document
"""

from .parser import GPXParserService, GPXParseError, ParsedGPX, TrackPoint, downsample
from .writer import build_gpx, gpx_filename

__all__ = [
    "GPXParserService",
    "GPXParseError",
    "ParsedGPX",
    "TrackPoint",
    "downsample",
    "build_gpx",
    "gpx_filename",
]
