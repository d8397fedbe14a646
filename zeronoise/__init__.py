"""Zero Noise - transcript-driven intelligence pipeline."""

__version__ = "1.0.0"
