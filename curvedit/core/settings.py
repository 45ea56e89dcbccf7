"""
Shared editor constants.

World units are integers; pixel values are canvas (widget) pixels.
"""

# Domain used for a fresh session
DEFAULT_X_MAX = 100

# Default y of newly created points
DEFAULT_Y = 0.0

# Anchors of the sorted curve types keep at least this gap on drag/insert
MIN_SEPARATION = 1

# t resolution used when inverting Bezier x(t) in the sampler
SAMPLE_STEPS = 100

# Catmull-Rom sampler accepts a t when |x(t) - x| is below this
CATMULL_ROM_X_TOLERANCE = 0.5

# Direction vectors shorter than this are treated as zero length
EPSILON = 1e-5

# Canvas padding around the plot area for axes and labels
PADDING = 50

# Pixel radius for point hover, and for segment hover per curve type
POINT_HIT_RADIUS = 7
SEGMENT_HIT_RADIUS = {
    "step": 7,
    "spline": 9,
    "natural": 7,
    "naturalCubic": 8,
}

# Number of ticks drawn along each axis
AXIS_TICKS = 10

# Initial y view per curve type: (centre, visible range)
VIEW_DEFAULTS = {
    "step": (495.0, 1010.0),
    "spline": (0.0, 2000.0),
    "natural": (0.0, 2000.0),
    "naturalCubic": (0.0, 2000.0),
}

X_ZOOM_RANGE = (1.0, 20.0)
Y_ZOOM_RANGE = (0.1, 20.0)
