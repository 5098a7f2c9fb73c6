class ConfigurationError(ValueError):
    """Raised when a puzzle is set up with invalid bottle contents or level data."""
