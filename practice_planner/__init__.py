"""Practice planner: recurring practice programs, sessions and GZCLP progression."""

__version__ = "0.1.0"
