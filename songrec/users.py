"""Users and their ratings, indexed by user id."""

from __future__ import annotations

from bisect import bisect_right
from dataclasses import dataclass, field


@dataclass(frozen=True)
class Rating:
    """One rating a user gave to a song."""

    song_id: int
    value: float


@dataclass
class UserData:
    """A user and every rating they gave, in the order given."""

    user_id: int
    ratings: list[Rating] = field(default_factory=list)


class UserNode:
    """A node of the user tree; leaves hold users, linked to their neighbours."""

    def __init__(self, is_leaf: bool = True) -> None:
        self.is_leaf = is_leaf
        self.keys: list[int] = []
        self.children: list[UserNode] = []
        self.data: list[UserData] = []
        self.next_leaf: UserNode | None = None
        self.previous_leaf: UserNode | None = None
        self._by_id: dict[int, UserData] = {}

    def insert_rating(self, user_id: int, rating: Rating) -> UserData:
        """Append ``rating`` to the user, adding the user if absent."""
        user = self._by_id.get(user_id)
        if user is not None:
            user.ratings.append(rating)
            return user
        user = UserData(user_id, [rating])
        self.keys.append(user_id)
        self.data.append(user)
        self._by_id[user_id] = user
        return user

    def find(self, user_id: int) -> UserData | None:
        return self._by_id.get(user_id)


class UserTree:
    """Index of users by id."""

    def __init__(self) -> None:
        self.root = UserNode(is_leaf=True)

    def leaf_for(self, user_id: int) -> UserNode:
        """The leaf where ``user_id`` lives or would live."""
        node = self.root
        while not node.is_leaf:
            node = node.children[bisect_right(node.keys, user_id)]
        return node

    def insert(self, user_id: int, rating: Rating) -> UserData:
        return self.leaf_for(user_id).insert_rating(user_id, rating)

    def find(self, user_id: int) -> UserData | None:
        return self.leaf_for(user_id).find(user_id)