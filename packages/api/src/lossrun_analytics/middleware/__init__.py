# This project was developed with assistance from AI tools.
"""Request-scoped dependencies."""
