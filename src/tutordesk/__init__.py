"""
TutorDesk core.

In-memory roster store for a tutor: teachers, students, enrollment
packages and dated lesson sessions, with a recurring-session generator
and debounced JSON persistence.
"""

__version__ = "0.1.0"
