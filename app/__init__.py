"""
Application Tracker
Job-application tracking backend with multi-filter listing.

Architecture:
- PostgreSQL: applications, resumes, cover letters, users
- Filter engine: concurrent per-filter lookups, intersected by application id
"""

__version__ = "1.0.0"
