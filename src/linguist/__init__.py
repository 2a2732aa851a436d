"""LinguistPro: spaced-repetition learning tracker backend."""

__version__ = "0.1.0"
