# ===== BOT SETTINGS =====
# Your bot's name (shows up in the GAME_START log line)
BOT_NAME = "Royale Bot"

# ===== LOGGING =====
# Echo every raw referee line to the log at DEBUG level. Very verbose,
# useful for replaying a turn locally, useless in the arena.
ECHO_INPUT = False

# File logging and console verbosity are controlled by environment
# variables so the arena build needs no edits:
#   ROYALE_LOG_TO_FILE=0         stderr only (no logs/ directory)
#   ROYALE_CONSOLE_LEVEL=DEBUG   show signals and decisions on stderr

# ===== TURN TIMING =====
# The referee gives roughly 50 ms per turn. Turns slower than this are
# logged as warnings and counted in the end-of-game stats.
TURN_TIME_BUDGET_MS = 50.0

# ===== POLICY TUNING =====
# Any constant below overrides the PolicyConfig default of the same
# (lower-case) name. Delete a line to fall back to the default.

# Economy
AVG_GOLD_PER_BARRACKS_SLOT = 60     # gold needed to keep one more barracks busy
PRICE_OF_ARCHER = 100
PRICE_OF_KNIGHT = 80
PRICE_OF_GIANT = 140

# Army composition
MAX_ARCHERS_BEFORE_SATURATION = 4
MIN_AVG_ARCHER_HEALTH = 30          # archers below this average are "expiring"
ENEMY_TOWERS_TRIGGER_GIANT = 4      # more enemy towers than this → train giants

# Expansion / defence
MIN_MINES = 3
MAX_FRIENDLY_TOWERS = 4
TARGET_TOWER_HEALTH = 400
QUEEN_SAFE_RADIUS = 150

# Set to True to visit the farthest empty site first (early land-grab
# ordering). Mines and towers are always handled nearest first.
EXPAND_FARTHEST_FIRST = False

# ===== POST-GAME LOG ANALYSIS =====
# When True, royale_log_analyzer.py runs automatically after every local
# game. It parses the latest session's logs, generates charts and appends
# a row to baseline.csv so you can track performance over time.
# Keep it False for arena submissions.
RUN_LOG_ANALYZER = False
