"""
LaserCalc - laser cutting engineering calculators.

Every calculator follows the same contract: validate the raw input against a
declarative schema, compute, and wrap the output in a result envelope.
"""

__version__ = "1.0.0"
