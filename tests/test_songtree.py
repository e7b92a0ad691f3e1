import random

import pytest

from songrec.songtree import MAX_KEYS, SongNode, SongTree
from songrec.stats import SongStats


def _rated(song_id, *values):
    song = SongStats(song_id)
    for value in values:
        song.add_rating(value)
    return song


def _all_nodes(node):
    yield node
    for child in node.children:
        yield from _all_nodes(child)


def test_traverse_yields_sorted_ids():
    ids = list(range(1, 51))
    random.Random(3).shuffle(ids)
    tree = SongTree()
    for song_id in ids:
        tree.insert(_rated(song_id, 3.0))
    assert [song.song_id for song in tree.traverse()] == sorted(ids)


def test_nodes_never_exceed_capacity():
    tree = SongTree()
    for song_id in range(100, 0, -1):
        tree.insert(_rated(song_id, 1.0))
    assert all(len(node.songs) <= MAX_KEYS for node in _all_nodes(tree.root))
    assert all(
        len(node.children) == len(node.songs) + 1
        for node in _all_nodes(tree.root)
        if not node.is_leaf
    )


def test_root_split_lifts_median():
    tree = SongTree()
    for song_id in (1, 2, 3, 4):
        tree.insert(_rated(song_id, 2.0))
    assert [s.song_id for s in tree.root.songs] == [2]
    assert [[s.song_id for s in c.songs] for c in tree.root.children] == [[1], [3, 4]]
    assert tree.find_song(4).song_id == 4
    assert tree.find_song(2) is None


def test_duplicate_insert_merges_in_leaf():
    tree = SongTree()
    tree.insert(_rated(1, 4.0))
    tree.insert(_rated(1, 2.0))
    song = tree.find_song(1)
    assert song.rating_count == 2
    assert song.average_rating == pytest.approx(song.total_rating / 2)
    assert len(tree.root.songs) == 1


def test_insert_stores_a_copy():
    tree = SongTree()
    original = _rated(5, 4.0)
    tree.insert(original)
    original.add_rating(1.0)
    assert tree.find_song(5).rating_count == 1


def test_search_returns_leaf_or_none():
    tree = SongTree()
    tree.insert(_rated(8, 1.0))
    node = tree.search(8)
    assert isinstance(node, SongNode) and node.is_leaf
    assert [s.song_id for s in node.songs] == [8]
    assert tree.search(9) is None
    assert tree.find_song(9) is None


def test_rated_songs_skip_unrated():
    tree = SongTree()
    tree.insert(SongStats(5))
    tree.insert(_rated(6, 3.0))
    assert [s.song_id for s in tree.rated_songs()] == [6]


def test_default_confidence_factor():
    assert SongTree().confidence_factor == 5


def test_load_csv(tmp_path):
    path = tmp_path / "ratings.csv"
    path.write_text(
        "1,10,4.0,100\n"
        "2,10,2.0,101\n"
        "\n"
        "garbage\n"
        "1,20,5.0,102\n"
        "3,30,1.0,\n",
        encoding="utf-8",
    )
    tree = SongTree()
    tree.load_csv(path)
    assert tree.find_song(10).rating_count == 2
    assert tree.find_song(20).rating_count == 1
    assert tree.find_song(30) is None
    assert tree.total_ratings == 3
    assert 2.0 < tree.global_average < 5.0
    for song in tree.rated_songs():
        assert min(song.average_rating, tree.global_average) <= song.bayesian_average
        assert song.bayesian_average <= max(song.average_rating, tree.global_average)


def test_load_csv_bad_number_raises(tmp_path):
    path = tmp_path / "ratings.csv"
    path.write_text("1,abc,4.0,100\n", encoding="utf-8")
    with pytest.raises(ValueError):
        SongTree().load_csv(path)


def _ranked_tree():
    tree = SongTree()
    tree.insert(_rated(1, 5.0, 5.0, 5.0))
    tree.insert(_rated(2, 1.0))
    tree.insert(_rated(3, 3.0, 4.0))
    tree.calculate_all_bayesian_averages()
    return tree


def test_top_and_bottom_are_ordered():
    tree = _ranked_tree()
    top = tree.top_n_bayesian(10)
    bottom = tree.bottom_n_bayesian(10)
    assert len(top) == 3
    assert [s.bayesian_average for s in top] == sorted(
        (s.bayesian_average for s in top), reverse=True
    )
    assert [s.song_id for s in bottom] == [s.song_id for s in reversed(top)]
    assert top[0].song_id == 1
    assert bottom[0].song_id == 2


def test_top_n_limits_and_non_positive():
    tree = _ranked_tree()
    assert len(tree.top_n_bayesian(2)) == 2
    assert tree.top_n_bayesian(0) == []
    assert tree.bottom_n_bayesian(-3) == []


def test_top_n_returns_copies():
    tree = _ranked_tree()
    best = tree.top_n_bayesian(1)[0]
    best.add_rating(0.0)
    assert tree.find_song(best.song_id).rating_count == 3


def test_zero_confidence_makes_bayesian_plain_average():
    tree = _ranked_tree()
    tree.set_confidence_factor(0)
    assert tree.confidence_factor == 0
    for song in tree.rated_songs():
        assert song.bayesian_average == pytest.approx(song.average_rating)


def test_empty_tree_global_average():
    tree = SongTree()
    tree.calculate_all_bayesian_averages()
    assert tree.global_average == 0.0
    assert tree.total_ratings == 0
    assert tree.top_n_bayesian(5) == []