"""
Pixel constants shared by the editor core and its adapters.

Every consumer accepts these as keyword-argument defaults, so a caller can
tune a single editor or renderer without touching module state.
"""

# Default box size, independent of box type
BOX_WIDTH = 100
BOX_HEIGHT = 60

# Bump semicircle radius; tips sit this far outside the box edge
BUMP_RADIUS = 6

# Maximum vertical gap between facing edges for a snap
SNAP_THRESHOLD = 20

# Maximum horizontal offset between box centers for a snap
ALIGN_TOLERANCE = 30

# Hit radius around a connection's tip for endpoint dragging
LINE_END_HIT_RADIUS = 12

# Hit distance from a connection's segment for the context menu
LINE_HIT_DISTANCE = 8

# Identity prefixes for generated ids
BOX_ID_PREFIX = "B"
CONNECTION_ID_PREFIX = "L"
