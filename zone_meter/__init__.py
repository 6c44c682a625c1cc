"""Zone usage metering agent."""

__version__ = "0.1.0"
