"""
Meeting Point

Finds the single meeting point that minimizes a group's total travel time
before everyone continues on to a shared destination. Geocoding and travel
metric lookups run concurrently against Google Maps Platform.
"""

__version__ = "0.1.0"
