"""
Pushup Challenge - 14-day calisthenics reminder engine

A personal desktop reminder utility that runs a fixed two-week pushup
program. Periodically prompts the user to perform a prescribed number of
repetitions, tracks daily totals and persists progress across restarts.
"""

__version__ = "0.1.0"
__author__ = "Pushup Challenge Team"
