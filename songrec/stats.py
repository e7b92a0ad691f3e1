"""Per-song rating statistics."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass
class SongStats:
    """Accumulated ratings of one song and the averages derived from them."""

    song_id: int
    total_rating: float = 0.0
    rating_count: int = 0
    average_rating: float = 0.0
    bayesian_average: float = 0.0

    def add_rating(self, rating: float) -> None:
        """Record one rating and refresh the plain average."""
        self.total_rating += rating
        self.rating_count += 1
        self.average_rating = (
            self.total_rating / self.rating_count if self.rating_count > 0 else 0.0
        )

    def calculate_bayesian_average(self, global_average: float, confidence: int) -> None:
        """Blend the song's average with the global one, weighted by ``confidence``."""
        if self.rating_count > 0:
            self.bayesian_average = (
                self.rating_count * self.average_rating + confidence * global_average
            ) / (self.rating_count + confidence)
        else:
            self.bayesian_average = global_average