"""Jotter - a terminal journal."""

__version__ = "0.1.0"
