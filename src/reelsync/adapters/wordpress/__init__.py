"""Scraped website dump adapter."""

from __future__ import annotations

from .reader import load_dump, read_wordpress_dataset
from .schema import WordPressDump, WordPressExperiment, WordPressMovie
from .translator import translate_dump, translate_experiment, translate_movie

__all__ = [
    "WordPressDump",
    "WordPressExperiment",
    "WordPressMovie",
    "load_dump",
    "read_wordpress_dataset",
    "translate_dump",
    "translate_experiment",
    "translate_movie",
]
