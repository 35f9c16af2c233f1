"""Default settings, environment variable names and storage keys."""

from weatherdash.config.schema import DisplaySettings

DEFAULT_SETTINGS = DisplaySettings()

API_KEY_ENV = "OPENWEATHER_API_KEY"

# Preference store keys
SETTINGS_KEY = "weatherAppSettings"
RECENT_SEARCHES_KEY = "recentSearches"
