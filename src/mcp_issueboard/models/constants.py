"""
Constants and default values for model conversions.

This module centralizes the default values and sentinels used when
converting store records to models, so that "magic values" such as the
deleted-sprint marker live in a single place.
"""

#
# Common defaults
#
EMPTY_STRING = ""
UNKNOWN = "Unknown"

#
# Issue defaults
#
ISSUE_DEFAULT_ID = "0"
ISSUE_KEY_PREFIX = "ISSUE-"
ISSUE_DEFAULT_KEY = f"{ISSUE_KEY_PREFIX}0"

# Position given to issues that are not placed on any board column, and to
# soft-deleted issues for both orderings.
UNPLACED_POSITION = -1.0

# Sprint id soft-deleted issues are parked under so they never share an
# ordering with a live sprint.
DELETED_SPRINT_ID = "DELETED-SPRINT-ID"

#
# Sprint defaults
#
SPRINT_DEFAULT_ID = "0"
SPRINT_NAME_PREFIX = "SPRINT-"

#
# Project defaults
#
PROJECT_DEFAULT_ID = "0"
# Key of the single project the board serves.
DEFAULT_PROJECT_KEY = "JIRA-CLONE"
