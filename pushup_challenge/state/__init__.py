"""
Challenge state module.

Immutable session state, the UI mode enumeration and the day-transition
evaluation that decides which mode the session should be in.
"""
