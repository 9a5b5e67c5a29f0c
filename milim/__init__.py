"""Milim: a Hebrew word-scramble puzzle game."""

__version__ = "1.0.0"
