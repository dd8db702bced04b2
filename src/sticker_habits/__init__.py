"""Habit tracker with a sticker reward draw."""

__version__ = "0.1.0"
