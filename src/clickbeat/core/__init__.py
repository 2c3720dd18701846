"""Core normalization pipeline: models, ports and pure conversions."""
