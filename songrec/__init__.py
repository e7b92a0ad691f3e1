"""Song rankings by Bayesian average and user-based recommendations from rating data."""

__version__ = "0.1.0"