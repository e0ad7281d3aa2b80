# progress_engine/constants.py
# Heuristic defaults for the prediction models. None of these are fitted;
# they are starting points that can be recalibrated per deployment.

# --- Trend analysis ---
DAYS_PER_WEEK = 7
DAYS_PER_MONTH = 30
MAX_ETA_DAYS = 36500  # dates further out than ~100 years count as unreachable

# --- Weight projection ---
PROJECTION_HORIZON_DAYS = 180
PROJECTION_STEP_DAYS = 7
MAX_DECAY_SHARE = 0.30  # long-range weekly change shrinks by at most 30%
WEIGHT_CONFIDENCE_FLOOR = 0.3
WEIGHT_CONFIDENCE_DECAY = 0.7  # 1.0 at day 0 down to the floor at the horizon
CONFIDENCE_Z_SCORE = 1.96  # 95% interval
HEADLINE_DAYS_SHORT = 30
HEADLINE_DAYS_LONG = 90
ADHERENCE_BLEND_WEIGHT = 0.5
CONSISTENCY_BLEND_WEIGHT = 0.5

# --- Strength projection ---
DEFAULT_MONTHLY_PROGRESSION_PCT = 2.0  # novice progression prior
EXPERIENCE_MULTIPLIERS = {
    'beginner': 1.5,
    'intermediate': 1.0,
    'advanced': 0.5,
    'elite': 0.25,
}
DEFAULT_EXPERIENCE_MULTIPLIER = 1.0
STRENGTH_PROJECTION_MONTHS = 6
DIMINISHING_RETURNS_STEP = 0.1

# --- Goal achievement ---
TREND_EPSILON = 0.01  # kg/week below which no progress is assumed
PROBABILITY_ADHERENCE_WEIGHT = 0.4
PROBABILITY_CONSISTENCY_WEIGHT = 0.4
PROBABILITY_BASE = 0.2
MAX_SUCCESS_PROBABILITY = 0.95
TRAJECTORY_AHEAD_RATIO = 0.8
TRAJECTORY_ON_TRACK_RATIO = 1.2
TRAJECTORY_BEHIND_RATIO = 1.5
ALTERNATIVE_TIMELINE_PROBABILITY = 0.7
ALTERNATIVE_TIMELINE_DAYS = 30
WEIGHT_LOSS_RATE_THRESHOLD = -0.5  # kg/week
MUSCLE_GAIN_RATE_THRESHOLD = 0.1  # kg/week

# --- Plateau risk ---
PLATEAU_WINDOW = 8
PLATEAU_WEIGHT_VARIANCE = 0.5
PLATEAU_WEIGHT_RATE = 0.1
PLATEAU_VOLUME_VARIANCE = 100.0
OVERTRAINING_WINDOW_DAYS = 30
OVERTRAINING_SESSION_LIMIT = 5
PLATEAU_OFFSET_DAYS = {
    'high': 14,
    'medium': 28,
}

# --- Milestones ---
WEIGHT_MILESTONE_STEPS = (5, 10)
STRENGTH_MILESTONE_LADDER = (60, 80, 100, 120, 140, 160, 180, 200, 220, 250, 300)
STREAK_MILESTONES = (30, 60, 90, 180, 365)
WEIGHT_MILESTONE_CONFIDENCE_FLOOR = 0.5
STRENGTH_MILESTONE_CONFIDENCE_FLOOR = 0.4
STREAK_MILESTONE_CONFIDENCE_FLOOR = 0.3
STREAK_ADHERENCE_SCALE = 0.8
WEEKS_PER_YEAR = 52
MONTHS_PER_YEAR = 12

# --- Overall confidence ---
DATA_POINT_WEIGHTS = {
    'workouts': 0.3,
    'nutrition': 0.3,
    'body_metrics': 0.4,
}
DATA_POINTS_FOR_FULL_CONFIDENCE = 100.0
DATA_CONFIDENCE_WEIGHT = 0.4
CONSISTENCY_CONFIDENCE_WEIGHT = 0.3
ADHERENCE_CONFIDENCE_WEIGHT = 0.3
