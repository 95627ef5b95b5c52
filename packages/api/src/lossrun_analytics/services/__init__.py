# This project was developed with assistance from AI tools.
"""Query resolution, filtering, aggregation, shaping, and store access."""
