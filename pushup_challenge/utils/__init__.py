"""
Utility functions module.

Time Semantics:
- Every calendar-day decision is made in the reference time zone (CET by
  default), never in the device's local zone
- The clock is injected so tests can move time freely
- Elapsed-day arithmetic is done on UTC instants to stay correct across
  daylight saving changes
"""
