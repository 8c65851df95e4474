class ConfigurationError(Exception):
    """Raised when static configuration cannot be loaded or is malformed."""
