class ConfigurationError(ValueError):
    """
    Invalid simulation input, raised before any propagation starts.
    Carries the offending field and the violated constraint.
    """
    def __init__(self, field: str, constraint: str):
        self.field = field
        self.constraint = constraint
        super().__init__(f"{field}: {constraint}")
