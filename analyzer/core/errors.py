class ConfigurationError(RuntimeError):
    """Analyzer settings failed validation at startup."""
    pass


class QuantityParseError(ValueError):
    """Malformed Kubernetes resource quantity (e.g. '12x', 'Mi')."""
    pass


class SnapshotSourceError(RuntimeError):
    """Errors related to snapshot sources (CSV 등)."""
    pass


class DataNotFoundError(SnapshotSourceError):
    """Requested service or column not found."""
    pass
