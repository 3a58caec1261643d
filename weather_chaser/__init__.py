"""
Weather Chaser
==============

Samples the weather over an area, ranks sample points by a composite
desirability score, and plans multi-day road trips that chase the best
weather under a daily travel budget.

Author: Weather Chaser Team
Version: 1.0.0
"""

__version__ = "1.0.0"
__author__ = "Weather Chaser Team"


def get_version():
    """Return the current version of the application"""
    return __version__


def get_info():
    """Return basic information about the application"""
    return {
        "name": "Weather Chaser",
        "version": __version__,
        "author": __author__,
        "description": "Weather-ranked area search and greedy road-trip planner"
    }
