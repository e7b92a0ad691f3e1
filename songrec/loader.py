"""Read a ratings CSV into the song tree, the user tree and lookup tables."""

from __future__ import annotations

from dataclasses import dataclass, field
from os import PathLike

from .songtree import SongTree, _leading_float, _leading_int
from .stats import SongStats
from .users import Rating, UserTree


@dataclass
class RatingTables:
    """Plain lookups built alongside the trees while loading."""

    user_song_ratings: dict[int, dict[int, float]] = field(default_factory=dict)
    song_ratings: dict[int, list[float]] = field(default_factory=dict)


def load_ratings(
    path: str | PathLike[str], song_tree: SongTree, user_tree: UserTree
) -> RatingTables:
    """Load ``user,song,rating,timestamp`` lines; ratings not above zero are ignored.

    Fills both trees, refreshes the song tree's Bayesian averages and
    returns the lookup tables.
    """
    tables = RatingTables()
    with open(path, encoding="utf-8") as handle:
        for raw in handle:
            line = raw.rstrip("\n")
            if not line:
                continue
            fields = line.split(",", 3)
            if len(fields) < 4 or not fields[3]:
                continue
            user_id = _leading_int(fields[0])
            song_id = _leading_int(fields[1])
            value = _leading_float(fields[2])
            if value <= 0.0:
                continue

            tables.user_song_ratings.setdefault(user_id, {})[song_id] = value
            tables.song_ratings.setdefault(song_id, []).append(value)

            existing = song_tree.find_song(song_id)
            if existing is not None:
                existing.add_rating(value)
            else:
                song = SongStats(song_id)
                song.add_rating(value)
                song_tree.insert(song)

            user_tree.insert(user_id, Rating(song_id, value))

    song_tree.calculate_all_bayesian_averages()
    return tables