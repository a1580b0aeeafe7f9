# config.py
"""
Configuration settings for the story player.
"""
FPS   = 30

# ── Basic Application Settings ──────────────────────────────────────────────

SHOW_OVERLAYS = False

# Path to directory containing story files (images, videos, .txt)
STORIES_PATH = "stories"

# Index of the first story to play (clamped to the sequence)
START_INDEX = 0

# Start over once the last story has finished
REPEAT = False

# Display settings
FULLSCREEN = False
WINDOWED_SIZE = (540, 960)

# ── Story timing ───────────────────────────────────────────────────────────

DEFAULT_STORY_SEC = 3.0   # images and text stories
PAUSE_HOLD_SEC    = 0.5   # guard window after a pause command
FAST_FORWARD_SEC  = 0.01  # progress bar run-out when skipping the last story

# ── Progress indicator ─────────────────────────────────────────────────────

PROGRESS_POSITION = "top"      # top | bottom | none
INDICATOR_HEIGHT  = "large"    # small | medium | large
INDICATOR_PADDING = (16, 8)    # horizontal, vertical
INDICATOR_COLOR   = (255, 255, 255)
INDICATOR_BG      = (255, 255, 255, 90)

# ── Web remote / diagnostics ───────────────────────────────────────────────

WEB_PORT = 8080
DIAG_REFRESH_INTERVAL = 1.0
LOG_FILE = "runtime.log"
