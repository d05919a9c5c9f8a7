"""
TraceCAD

Converts raster drawings (images and PDF pages) into DXF vector geometry.
"""

__version__ = "0.1.0"
