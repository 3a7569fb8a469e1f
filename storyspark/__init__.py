"""
StorySpark: AI-powered storybook generator for kids.

Writes a short four page story about any topic, then pages through it while
painting an illustration and recording a warm narration for each page.
Sparky, a friendly chat buddy, is always around to talk.

CLI Usage:
    $ storyspark "A brave kitten in space"
    $ storyspark chat
    $ python -m storyspark "The dragon who loved baking cakes"
"""

from .StorySpark import app

__version__ = "0.1.0"

__all__ = [
    "app",
]
