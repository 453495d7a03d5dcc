"""PurpleSim: purple team exercise simulation engine."""

__version__ = "0.1.0"
