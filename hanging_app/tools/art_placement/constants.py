from __future__ import annotations

TOOL_ID = "art_placement"

CM_PER_INCH = 2.54

DEFAULT_UNITS = "cm"

# 60 in, the usual gallery eye-level centre line
DEFAULT_TARGET_CENTROID_CM = 152.4

# Nail sits roughly 1 in above the taut wire to absorb sag
DEFAULT_HANGER_OFFSET_CM = 2.54
DEFAULT_HANGER_OFFSET_IN = 1.0

DEFAULT_GAP = 10.0

# Stored lengths are rounded to this many decimals after a unit switch
CONVERSION_DECIMALS = 1
# Reported nail heights, centroids and distances
RESULT_DECIMALS = 2
