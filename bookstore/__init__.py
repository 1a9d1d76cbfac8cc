"""ISBN-keyed book catalogue served over HTTP and persisted to a JSON file."""

__version__ = "1.0.0"
