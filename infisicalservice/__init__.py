"""Infisical secrets service: semantic action and REST front-end for Infisical."""

__version__ = "1.0.0"
