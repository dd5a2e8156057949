"""Kinemotion: vertical jump analysis from pose landmarks and motion sensors."""

__version__ = "0.1.0"
