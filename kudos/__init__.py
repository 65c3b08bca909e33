"""Kudos -- testimonial moderation engine."""

__version__ = "0.4.0"
