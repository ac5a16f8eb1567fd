"""Unix style command line option and configuration file parsing."""

__version__ = "1.0.3"
__all__ = ["app", "config", "matches", "options"]