"""
Configuration settings for mesh2vtk.

Defaults used by the command line and the conversion runner. Users can modify
these values to change the behaviour without touching the core code.
"""

from __future__ import annotations

# =============================================================================
# Output Naming
# =============================================================================

# Stem of the output files, the tally number and extension are appended
DEFAULT_OUTPUT_NAME = "fmesh"

# Cell data array names
RESULT_ARRAY_NAME = "result"
ERROR_ARRAY_NAME = "rel_error"

# =============================================================================
# Conversion Defaults
# =============================================================================

# Multiplier applied to every result
DEFAULT_SCALE = 1.0

# Angular subdivision of cylindrical theta bins
DEFAULT_RESOLUTION = 1

# Large resolutions define every vertex explicitly, warn above this
RESOLUTION_WARNING_THRESHOLD = 20

# =============================================================================
# VTK Encoding
# =============================================================================

# One of: xml, legacy-ascii, legacy-binary
DEFAULT_VTK_FORMAT = "xml"

# Byte order of binary payloads: big-endian or little-endian
DEFAULT_BYTE_ORDER = "big-endian"

# One of: lzma, lz4, zlib, none (xml only)
DEFAULT_COMPRESSOR = "lzma"

# =============================================================================
# Geometry Preview
# =============================================================================

PLOT_DPI = 150
PLOT_FIGSIZE = (8, 8)
PLOT_CMAP = "viridis"
PLOT_EDGE_COLOR = (0.1, 0.1, 0.1, 0.3)
PLOT_ALPHA = 0.6
