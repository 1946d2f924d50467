"""Route helpers for the unit's HTTP API.

Routes:
  - /v1/current_conditions (poll)
  - /v1/real_time?duration=<seconds> (enable UDP broadcasts)
"""
