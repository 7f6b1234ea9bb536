class SpacetimeError(Exception):
    pass


class SingularInputError(SpacetimeError, ValueError):
    """Ray origin at the coordinate origin or carrying non-finite components."""


class HorizonError(SpacetimeError, ValueError):
    """Metric quantity requested at or below the Schwarzschild radius."""
