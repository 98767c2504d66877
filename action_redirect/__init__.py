"""
action-redirect - controller redirect resolution and dispatch.
"""

__version__ = "0.1.0"
