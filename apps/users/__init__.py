"""Users app package.

Defines the custom user model (``apps.users.models.CustomUser``) shared
by renters, vendors and administrators, plus the JWT based
registration and login endpoints.
"""
