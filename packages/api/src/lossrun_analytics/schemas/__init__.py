# This project was developed with assistance from AI tools.
"""Response schemas for the analytics API."""
