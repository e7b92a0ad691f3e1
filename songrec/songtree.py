"""A B-tree of song statistics keyed by song id, with Bayesian rankings."""

from __future__ import annotations

import re
from bisect import bisect_left, bisect_right
from dataclasses import replace
from itertools import chain
from os import PathLike
from typing import Iterator

from .stats import SongStats

ORDER = 4
MAX_KEYS = ORDER - 1
_KEEP = (ORDER - 1) // 2
_SPLIT_AT = ORDER // 2

DEFAULT_CONFIDENCE = 5

_INT_PREFIX = re.compile(r"\s*([+-]?\d+)")
_FLOAT_PREFIX = re.compile(
    r"\s*([+-]?(?:\d+\.?\d*(?:[eE][+-]?\d+)?|\.\d+(?:[eE][+-]?\d+)?))"
)


def _leading_int(text: str) -> int:
    match = _INT_PREFIX.match(text)
    if match is None:
        raise ValueError(f"not an integer: {text!r}")
    return int(match.group(1))


def _leading_float(text: str) -> float:
    match = _FLOAT_PREFIX.match(text)
    if match is None:
        raise ValueError(f"not a number: {text!r}")
    return float(match.group(1))


def _song_key(song: SongStats) -> int:
    return song.song_id


class SongNode:
    """One node of the song tree; holds at most ``MAX_KEYS`` songs."""

    def __init__(self, is_leaf: bool) -> None:
        self.is_leaf = is_leaf
        self.songs: list[SongStats] = []
        self.children: list[SongNode] = []

    @property
    def is_full(self) -> bool:
        return len(self.songs) == MAX_KEYS

    def insert_non_full(self, song: SongStats) -> None:
        """Insert a copy of ``song`` below this node, merging into an existing leaf entry."""
        if self.is_leaf:
            for existing in self.songs:
                if existing.song_id == song.song_id:
                    existing.total_rating += song.total_rating
                    existing.rating_count += song.rating_count
                    if existing.rating_count > 0:
                        existing.average_rating = (
                            existing.total_rating / existing.rating_count
                        )
                    return
            position = bisect_right(self.songs, song.song_id, key=_song_key)
            self.songs.insert(position, replace(song))
            return

        index = bisect_right(self.songs, song.song_id, key=_song_key)
        if self.children[index].is_full:
            self.split_child(index, self.children[index])
            if self.songs[index].song_id < song.song_id:
                index += 1
        self.children[index].insert_non_full(song)

    def split_child(self, index: int, child: SongNode) -> None:
        """Split ``child`` (the child at ``index``), lifting its median into this node."""
        sibling = SongNode(child.is_leaf)
        sibling.songs = child.songs[_SPLIT_AT:_SPLIT_AT + _KEEP]
        if not child.is_leaf:
            sibling.children = child.children[_SPLIT_AT:_SPLIT_AT + _KEEP + 1]
        self.children.insert(index + 1, sibling)
        self.songs.insert(index, child.songs[_KEEP])
        child.songs = child.songs[:_KEEP]
        if not child.is_leaf:
            child.children = child.children[:_KEEP + 1]

    def search(self, song_id: int) -> SongNode | None:
        """Return the leaf holding ``song_id``, or None."""
        index = bisect_left(self.songs, song_id, key=_song_key)
        if self.is_leaf:
            if index < len(self.songs) and self.songs[index].song_id == song_id:
                return self
            return None
        return self.children[index].search(song_id)

    def find_song(self, song_id: int) -> SongStats | None:
        """Return the leaf entry for ``song_id``, or None."""
        leaf = self.search(song_id)
        if leaf is None:
            return None
        return leaf.songs[bisect_left(leaf.songs, song_id, key=_song_key)]

    def rated_songs(self) -> list[SongStats]:
        """Leaf entries below this node that have at least one rating, in key order."""
        if self.is_leaf:
            return [song for song in self.songs if song.rating_count > 0]
        return list(chain.from_iterable(child.rated_songs() for child in self.children))

    def traverse(self) -> Iterator[SongStats]:
        """Yield every song stored below this node, internal keys included, in order."""
        if self.is_leaf:
            yield from self.songs
            return
        for child, song in zip(self.children, self.songs):
            yield from child.traverse()
            yield song
        yield from self.children[len(self.songs)].traverse()


class SongTree:
    """Song statistics indexed by id, ranked by a Bayesian average."""

    def __init__(self, confidence_factor: int = DEFAULT_CONFIDENCE) -> None:
        self.root = SongNode(is_leaf=True)
        self.confidence_factor = confidence_factor
        self.global_average = 0.0
        self.total_ratings = 0

    def insert(self, song: SongStats) -> None:
        """Store a copy of ``song``, growing the tree when the root is full."""
        if self.root.is_full:
            new_root = SongNode(is_leaf=False)
            new_root.children.append(self.root)
            new_root.split_child(0, self.root)
            index = 1 if new_root.songs[0].song_id < song.song_id else 0
            new_root.children[index].insert_non_full(song)
            self.root = new_root
        else:
            self.root.insert_non_full(song)

    def find_song(self, song_id: int) -> SongStats | None:
        return self.root.find_song(song_id)

    def search(self, song_id: int) -> SongNode | None:
        return self.root.search(song_id)

    def traverse(self) -> Iterator[SongStats]:
        return self.root.traverse()

    def rated_songs(self) -> list[SongStats]:
        return self.root.rated_songs()

    def load_csv(self, path: str | PathLike[str]) -> None:
        """Read ``user,song,rating,timestamp`` lines and accumulate each rating."""
        with open(path, encoding="utf-8") as handle:
            for raw in handle:
                line = raw.rstrip("\n")
                if not line:
                    continue
                fields = line.split(",", 3)
                if len(fields) < 4 or not fields[3]:
                    continue
                song_id = _leading_int(fields[1])
                rating = _leading_float(fields[2])
                existing = self.find_song(song_id)
                if existing is not None:
                    existing.add_rating(rating)
                else:
                    song = SongStats(song_id)
                    song.add_rating(rating)
                    self.insert(song)
        self.calculate_all_bayesian_averages()

    def calculate_global_average(self) -> None:
        songs = self.rated_songs()
        total = sum(song.total_rating for song in songs)
        count = sum(song.rating_count for song in songs)
        self.global_average = total / count if count > 0 else 0.0
        self.total_ratings = count

    def update_bayesian_averages(self) -> None:
        for song in self.rated_songs():
            song.calculate_bayesian_average(self.global_average, self.confidence_factor)

    def calculate_all_bayesian_averages(self) -> None:
        self.calculate_global_average()
        self.update_bayesian_averages()

    def set_confidence_factor(self, factor: int) -> None:
        self.confidence_factor = factor
        self.update_bayesian_averages()

    def top_n_bayesian(self, n: int) -> list[SongStats]:
        """Copies of the ``n`` rated songs with the highest Bayesian average."""
        ranked = sorted(self.rated_songs(), key=lambda s: s.bayesian_average, reverse=True)
        return [replace(song) for song in ranked[:max(n, 0)]]

    def bottom_n_bayesian(self, n: int) -> list[SongStats]:
        """Copies of the ``n`` rated songs with the lowest Bayesian average."""
        ranked = sorted(self.rated_songs(), key=lambda s: s.bayesian_average)
        return [replace(song) for song in ranked[:max(n, 0)]]