"""User similarity and collaborative song recommendations."""

from __future__ import annotations

import math
from itertools import chain
from typing import Iterator

from .users import UserData, UserNode, UserTree

DEFAULT_SIMILAR_LIMIT = 10
DEFAULT_NEIGHBOURS = 10
DEFAULT_RECOMMENDATIONS = 5


class UserNotFoundError(LookupError):
    """Raised when a user id is not present in the user tree."""

    def __init__(self, user_id: int) -> None:
        super().__init__(f"user {user_id} not found")
        self.user_id = user_id


def pearson(a: UserData, b: UserData) -> float:
    """Pearson correlation of two users over the songs both rated.

    Returns 0.0 when fewer than two songs are shared or when either
    user's ratings on the shared songs do not vary.
    """
    ratings_a = {rating.song_id: rating.value for rating in a.ratings}
    ratings_b = {rating.song_id: rating.value for rating in b.ratings}
    common = sorted(ratings_a.keys() & ratings_b.keys())
    if len(common) < 2:
        return 0.0

    xs = [ratings_a[song_id] for song_id in common]
    ys = [ratings_b[song_id] for song_id in common]
    n = len(common)
    sum_a = sum(xs)
    sum_b = sum(ys)
    sum_a2 = sum(x * x for x in xs)
    sum_b2 = sum(y * y for y in ys)
    sum_ab = sum(x * y for x, y in zip(xs, ys))

    numerator = sum_ab - sum_a * sum_b / n
    spread = (sum_a2 - sum_a * sum_a / n) * (sum_b2 - sum_b * sum_b / n)
    if spread <= 0:
        return 0.0
    return numerator / math.sqrt(spread)


def _backward(leaf: UserNode | None) -> Iterator[UserData]:
    while leaf is not None:
        yield from reversed(leaf.data)
        leaf = leaf.previous_leaf


def _forward(leaf: UserNode | None) -> Iterator[UserData]:
    while leaf is not None:
        yield from leaf.data
        leaf = leaf.next_leaf


def similar_neighbours(
    leaf: UserNode, target: UserData, threshold: int
) -> list[tuple[float, UserData]]:
    """Score up to ``threshold`` users stored near ``target``'s leaf.

    Users are taken from the starting leaf backwards, then from the leaves
    after it, skipping the target itself. Returns ``(similarity, user)``
    pairs in visiting order.
    """
    visited = {target.user_id}
    remaining = threshold
    neighbours: list[tuple[float, UserData]] = []
    for user in chain(_backward(leaf), _forward(leaf.next_leaf)):
        if remaining <= 0:
            break
        if user.user_id in visited:
            continue
        neighbours.append((pearson(target, user), user))
        visited.add(user.user_id)
        remaining -= 1
    return neighbours


def _ranked_neighbours(
    tree: UserTree, user_id: int, threshold: int
) -> tuple[UserData, list[tuple[float, UserData]]]:
    target = tree.find(user_id)
    if target is None:
        raise UserNotFoundError(user_id)
    neighbours = similar_neighbours(tree.leaf_for(user_id), target, threshold)
    neighbours.sort(key=lambda pair: pair[0], reverse=True)
    return target, neighbours


def similar_users(
    tree: UserTree,
    user_id: int,
    threshold: int,
    limit: int = DEFAULT_SIMILAR_LIMIT,
) -> list[tuple[float, UserData]]:
    """The ``limit`` most similar users among ``threshold`` nearby ones, best first."""
    _, neighbours = _ranked_neighbours(tree, user_id, threshold)
    return neighbours[:max(limit, 0)]


def recommend_songs(
    tree: UserTree,
    user_id: int,
    threshold: int,
    neighbours: int = DEFAULT_NEIGHBOURS,
    count: int = DEFAULT_RECOMMENDATIONS,
) -> list[tuple[int, float]]:
    """Songs the user has not rated, scored by similarity-weighted neighbour ratings.

    Returns up to ``count`` ``(song_id, score)`` pairs, highest score first;
    equal scores put the higher song id first.
    """
    target, ranked = _ranked_neighbours(tree, user_id, threshold)
    listened = {rating.song_id for rating in target.ratings}

    scores: dict[int, float] = {}
    for weight, neighbour in ranked[:max(neighbours, 0)]:
        for rating in neighbour.ratings:
            if rating.song_id not in listened:
                scores[rating.song_id] = (
                    scores.get(rating.song_id, 0.0) + weight * rating.value
                )

    ordered = sorted(scores.items(), key=lambda item: (item[1], item[0]), reverse=True)
    return ordered[:max(count, 0)]