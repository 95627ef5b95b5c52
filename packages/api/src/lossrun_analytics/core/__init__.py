# This project was developed with assistance from AI tools.
"""Settings, app registry, and clock."""
