"""
Centralized configuration for all modules
"""
import os
from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()

# Application name (shown in logs and API responses)
APP_NAME = os.environ.get('APP_NAME', 'TagCache')

# ==================== PATHS ====================

# Data storage
DATABASE_PATH = os.environ.get('DATABASE_PATH', './tags.db')

# Base URL used when turning tag short-links into real links
SERVE_PATH = os.environ.get('SERVE_PATH', 'http://localhost:5000').rstrip('/')

# ==================== SECURITY ====================

# Secret required by the on-demand reload endpoint
RELOAD_SECRET = os.environ.get('RELOAD_SECRET', 'change-this-secret')

# ==================== TAG CACHE ====================

# How many recently created, in-use tags to keep in the "new tags" view
NEW_TAGS_CNT = int(os.environ.get('NEW_TAGS_CNT', 10))

# Default number of icon tags served when the caller does not ask for a size
ICON_TAGS_FETCH_SIZE = int(os.environ.get('ICON_TAGS_FETCH_SIZE', 12))

# Historically get_icon_tags() dropped the last element whenever the requested
# size reached the collection size. Keep that unless explicitly disabled.
ICON_TAGS_KEEP_LAST_DROP = os.environ.get('ICON_TAGS_KEEP_LAST_DROP', 'true').lower() == 'true'

# ==================== TAG TITLES ====================

MAX_TAG_TITLE_LENGTH = int(os.environ.get('MAX_TAG_TITLE_LENGTH', 9))

# Titles accepted even though they fail the title pattern or length check
TAG_TITLE_WHITELIST = [
    title.strip()
    for title in os.environ.get('TAG_TITLE_WHITELIST', 'C#,F#,Objective-C,ActionScript').split(',')
    if title.strip()
]

# ==================== SCHEDULER ====================

# Background reloading of the tag cache views
TAG_CACHE_SCHEDULER_ENABLED = os.environ.get('TAG_CACHE_SCHEDULER_ENABLED', 'true').lower() == 'true'
NEW_TAGS_RELOAD_INTERVAL = int(os.environ.get('NEW_TAGS_RELOAD_INTERVAL', 60))  # seconds
ICON_TAGS_RELOAD_INTERVAL = int(os.environ.get('ICON_TAGS_RELOAD_INTERVAL', 300))  # seconds
ALL_TAGS_RELOAD_INTERVAL = int(os.environ.get('ALL_TAGS_RELOAD_INTERVAL', 600))  # seconds

# ==================== DATABASE PERFORMANCE ====================

DB_BUSY_TIMEOUT = float(os.environ.get('DB_BUSY_TIMEOUT', 30.0))  # seconds to wait for locks
DB_CACHE_SIZE_MB = int(os.environ.get('DB_CACHE_SIZE_MB', 16))

# ==================== SERVER ====================

HOST = os.environ.get('HOST', '0.0.0.0')
PORT = int(os.environ.get('PORT', 5000))

# ==================== LOGGING ====================

LOG_LEVEL = os.environ.get('LOG_LEVEL', 'INFO')

# ==================== VALIDATION ====================

def validate_config():
    """Validate configuration and warn about issues"""
    warnings = []

    if NEW_TAGS_CNT <= 0:
        warnings.append(f"NEW_TAGS_CNT should be positive, got {NEW_TAGS_CNT}")

    if MAX_TAG_TITLE_LENGTH <= 0:
        warnings.append(f"MAX_TAG_TITLE_LENGTH should be positive, got {MAX_TAG_TITLE_LENGTH}")

    if RELOAD_SECRET == 'change-this-secret':
        warnings.append("RELOAD_SECRET is set to default value - change this for production!")

    if warnings:
        print("\n⚠️  Configuration Warnings:")
        for warning in warnings:
            print(f"  - {warning}")
        print()

    return len(warnings) == 0

# ==================== HELPER FUNCTIONS ====================

def get_tag_cache_config():
    """Get tag cache configuration as a dict"""
    return {
        "new_tags_cnt": NEW_TAGS_CNT,
        "icon_tags_fetch_size": ICON_TAGS_FETCH_SIZE,
        "icon_tags_keep_last_drop": ICON_TAGS_KEEP_LAST_DROP,
        "max_tag_title_length": MAX_TAG_TITLE_LENGTH,
        "tag_title_whitelist": list(TAG_TITLE_WHITELIST),
        "scheduler_enabled": TAG_CACHE_SCHEDULER_ENABLED,
        "reload_intervals": {
            "new": NEW_TAGS_RELOAD_INTERVAL,
            "icon": ICON_TAGS_RELOAD_INTERVAL,
            "all": ALL_TAGS_RELOAD_INTERVAL,
        },
    }
