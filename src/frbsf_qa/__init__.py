"""FRBSF E2E Automation Framework."""

__version__ = "1.0.0"
