"""Application constants.

This module contains magic strings and numbers used throughout the application.
Centralizing these values makes them easier to maintain and modify.
"""

# User roles
# The mobile client calls this field "rule": 1 = student, 2 = instructor
ROLE_STUDENT = 1
ROLE_TEACHER = 2
USER_ROLES = (ROLE_STUDENT, ROLE_TEACHER)

# Class Code Configuration
# Class join codes are 8-character pronounceable strings
CLASS_CODE_LENGTH = 8

# Geofence
# Mean earth radius used by the haversine approximation
EARTH_RADIUS_METERS = 6_371_000.0

# JWT Token Configuration
# Token expiration time in minutes (7 days, the app keeps users signed in)
ACCESS_TOKEN_EXPIRE_MINUTES = 10080

# Passwords
MIN_PASSWORD_LENGTH = 6
