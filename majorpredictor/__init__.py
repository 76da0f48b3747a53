"""Major Predictor: AI match predictions for tournament bracket pages."""

__all__ = [
    "cli",
    "config",
    "constants",
    "exceptions",
    "schema",
    "normalization",
    "ingestion",
    "extraction",
    "providers",
    "prediction",
    "engine",
    "presentation",
    "storage",
    "reporting",
    "ops",
]

__version__ = "0.1.0"
