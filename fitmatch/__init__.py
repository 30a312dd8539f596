"""FitMatch: partner matching and chat delivery for fitness-social apps."""

__version__ = "0.1.0"
