"""
Constants for basketball event fusion
"""

# Team identifiers
TEAM_A = "teamA"
TEAM_B = "teamB"
UNKNOWN_TEAM = "unknown"
DEFAULT_TEAM = TEAM_A

# Frame geometry (pixels of the sampled frame)
COURT_WIDTH = 1280
COURT_HEIGHT = 720

# COCO-17 pose keypoint layout
KEYPOINT_NAMES = (
    "nose",
    "left_eye",
    "right_eye",
    "left_ear",
    "right_ear",
    "left_shoulder",
    "right_shoulder",
    "left_elbow",
    "right_elbow",
    "left_wrist",
    "right_wrist",
    "left_hip",
    "right_hip",
    "left_knee",
    "right_knee",
    "left_ankle",
    "right_ankle",
)

# Temporal windows (seconds)
TEMPORAL_WINDOW = 1.0
SCORE_ATTRIBUTION_WINDOW = 0.5
REBOUND_WINDOW = 2.0
MISSED_SHOT_WINDOW = 2.0
SHOT_TYPE_LOOKBACK = 3.0
FRAME_MATCH_TOLERANCE = 0.1

# Shot attempt detection
BALL_MOTION_WINDOW = 0.5
SHOT_BALL_PROXIMITY = 150.0
TEAM_MATCH_DISTANCE = 50.0
POSE_WEIGHT = 0.65
BALL_MOTION_WEIGHT = 0.35
SHOT_CORROBORATION_BONUS = 0.1
SHOT_CONFIDENCE_FLOOR = 0.3
MIN_UPWARD_MOTION = 15.0
PRESENCE_SAMPLE_INTERVAL = 15
PRESENCE_EDGE_MARGIN = 10

# Score detection
HOOP_REGION_MAX_Y = 0.4
TEAM_MAJORITY = 0.6
OCR_WEIGHT = 0.9
TEAM_ATTRIBUTION_WEIGHT = 0.1
OCR_STABILITY_BONUS = 0.1
HOOP_SEARCH_WINDOW = 2.0
VISUAL_SCORE_FACTOR = 0.75
ESTIMATED_MAKE_RATE = 0.4
ESTIMATED_SCORE_CONFIDENCE = 0.45

# Rebounds
REBOUND_PROXIMITY = 150.0
PROXIMITY_WEIGHT = 0.6
TEAM_ID_WEIGHT = 0.4
INFERRED_REBOUND_CONFIDENCE = 0.45

# Possession / turnovers
POSSESSION_PROXIMITY = 100.0
STEAL_WINDOW = 1.5
MIN_BALL_FRAMES = 5
GAME_FLOW_MIN_GAP = 3.0
GAME_FLOW_MAX_GAP = 15.0
INFERRED_TURNOVER_CONFIDENCE = 0.45

# Confidence model
CORROBORATION_THRESHOLD = 0.6
CORROBORATION_BONUS = 0.08

# Filtering
DEFAULT_CONFIDENCE_FLOOR = 0.3

# Points per shot type
SHOT_TYPE_POINTS = {"1pt": 1, "2pt": 2, "3pt": 3}

# Degraded-mode confidences
BALL_TRAJECTORY_MAX_CONFIDENCE = 0.5
PRESENCE_SHOT_CONFIDENCE = 0.35
