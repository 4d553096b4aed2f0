"""
Constants for time accounting defaults and service metadata
"""

SERVICE_NAME = "punch"

# Ramp-up time deducted from every work session before it counts as productive
DEFAULT_OVERHEAD_MINUTES = 15

# Summary report windows
DEFAULT_REPORT_DAYS = 14
DEFAULT_REPORT_WEEKS = 8
DEFAULT_RECENT_EVENTS = 10

# Name of the singleton project created by `punch init`
DEFAULT_PROJECT_NAME = "Project"
