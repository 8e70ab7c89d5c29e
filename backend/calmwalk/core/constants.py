"""Shared analysis constants.

Centralizes the radii, thresholds and increments used by clustering, zone
merging, insights and routing so we can document and adjust them in one place.
"""

# Mean Earth radius in meters (haversine)
EARTH_RADIUS_M = 6_371_000.0

# Clustering radius used when turning a finished session into zones
ZONE_CLUSTER_RADIUS_M = 30.0

# A cluster merges into an existing zone whose center is closer than this
ZONE_MERGE_RADIUS_M = 50.0

# Radius given to newly created zones
NEW_ZONE_RADIUS_M = 30.0

# Clusters need at least this many entries to become a zone
MIN_ZONE_ENTRIES = 2

# Stress/calm rate a cluster must exceed to be classified
ZONE_RATE_THRESHOLD = 0.6

# Saturating score bump applied when a zone sees repeat evidence
ZONE_SCORE_INCREMENT = 0.1

# Clustering radius for the location-pattern insight
INSIGHT_CLUSTER_RADIUS_M = 50.0

# Minimum entries before the location-pattern insight is attempted
MIN_LOCATION_PATTERN_ENTRIES = 3

# Noise above this level (dB) is considered potentially stressful
HIGH_NOISE_DB = 60.0

# Time-of-day buckets: morning [6, 12), afternoon [12, 18), evening otherwise
MORNING_START_HOUR = 6
AFTERNOON_START_HOUR = 12
EVENING_START_HOUR = 18

# Best period must be under LOW, worst over HIGH, for a time-of-day insight
TIME_PATTERN_LOW_RATE = 0.2
TIME_PATTERN_HIGH_RATE = 0.4

# Route scoring
BASE_CALM_SCORE = 0.5
STRESS_HIT_PENALTY = 0.1
CALM_HIT_REWARD = 0.05

# Average walking speed (m/s)
WALKING_SPEED_MPS = 1.4

# Fallback route synthesis: one step per this many meters, clamped
FALLBACK_STEP_M = 200.0
FALLBACK_MIN_STEPS = 3
FALLBACK_MAX_STEPS = 8
# Full width of the jitter window in degrees (applied as +/- half of it)
FALLBACK_JITTER_DEG = 0.0001

# Segment instruction distance bands (m)
CONTINUE_STRAIGHT_M = 30.0
WALK_DIRECTION_M = 100.0

# Simple suggestion: zones must be this close to both endpoints
SUGGESTION_NEARBY_M = 200.0
SUGGESTION_CALM_WEIGHT = 0.3
SUGGESTION_STRESS_PENALTY = 0.2
# Walking pace used for quick previews
MINUTES_PER_KM = 12.0

# Walkability / difficulty bands
MAX_WALKABLE_ROUTE_M = 5000.0
MAX_WALKABLE_SEGMENT_M = 1000.0
EASY_ROUTE_M = 1000.0
EASY_ROUTE_SCORE = 0.7
MODERATE_ROUTE_M = 2500.0
MODERATE_ROUTE_SCORE = 0.4

EXPORT_VERSION = "1.0.0"
