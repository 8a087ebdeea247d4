"""Project Navigator: retrieval-augmented, tool-calling mentor engine."""

__version__ = "0.1.0"
