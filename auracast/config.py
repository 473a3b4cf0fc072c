MODEL_NAMES = ["lstm", "transformer", "cnn"]

# Combiner
UNCERTAINTY_WEIGHT_SCALE = 50.0
CONFIDENCE_SCALE = 100.0
CONFIDENCE_FLOOR = 0.1
CONFIDENCE_CEILING = 0.95
Z_SCORE_95 = 1.96
AQI_FLOOR = 0.0

# Anomaly scorer
MIN_ANOMALY_POINTS = 24
ANOMALY_BASE_THRESHOLD = 3.0
HIGH_SEVERITY_Z = 4.0
DEFAULT_SENSITIVITY = 0.8
ANOMALY_CONFIDENCE_BASE = 0.5

# Pattern recognition
MORNING_HOURS = (6, 12)
EVENING_HOURS = (17, 22)
SEASONAL_DIFF_THRESHOLD = 20.0
DAILY_PATTERN_CONFIDENCE = 0.8
SEASONAL_PATTERN_CONFIDENCE = 0.75

# Orchestrator
FALLBACK_CONFIDENCE = 0.5
FALLBACK_UNCERTAINTY = 25.0
DEFAULT_HORIZON_HOURS = 24
MAX_HORIZON_HOURS = 72
ZONE_BATCH_SIZE = 5

SIMULATED_MODEL_PARAMS = {
    "lstm": {"noise_scale": 8.0, "seed": 11},
    "transformer": {"noise_scale": 12.0, "seed": 23},
    "cnn": {"noise_scale": 5.0, "seed": 37},
}
DIURNAL_AMPLITUDE = 20.0
REFERENCE_TEMPERATURE = 25.0
TEMPERATURE_COEF = 0.5

# Optimistic ledger
MAX_PENDING_UPDATES = None
MUTATION_TIMEOUT_S = 10.0
MUTATION_RETRIES = 2
MUTATION_BACKOFF_S = 0.5

API_HOST = "0.0.0.0"
API_PORT = 8000
