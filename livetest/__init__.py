"""
livetest - test orchestration harness with on-demand live HTTP servers.
"""

__version__ = '0.1.0'
