# songrec

songrec reads a CSV file of song ratings. It ranks songs by a Bayesian average and recommends songs to a user by comparing that user's ratings with the ratings of other users.

## Input format

Each line holds four comma-separated fields:

```
user_id,song_id,rating,timestamp
```

The fourth field must be present and non-empty, but its value is ignored. Lines with fewer fields, and empty lines, are skipped. The id and rating fields are read from their leading number, so `12abc` reads as `12`. A field with no leading number raises `ValueError`.

## Command line

```
songrec [CSV]
```

`CSV` is the ratings file. It defaults to `data/ratings_s.csv`. `load_ratings` reads the file, so ratings that are zero or negative are left out. If the file cannot be opened, the command prints an error to standard error and continues with no data.

The command then shows an interactive menu. The menu prompts are in Spanish. Every answer is an integer read from standard input:

1. Top N songs by Bayesian average
2. Bottom N songs by Bayesian average
3. The users most similar to a given user (at most 10 are shown)
4. Song recommendations for a given user (at most 5 are shown, based on the 10 most similar neighbours)
0. Quit

Options 3 and 4 ask for a user id and a neighbour threshold. The threshold is the number of other users to compare against. An unknown user id prints `Usuario no encontrado.`. The menu exits when you choose 0. It also exits when input runs out or is not an integer, because such input counts as 0.

## Library use

```python
from songrec.songtree import SongTree
from songrec.users import UserTree
from songrec.loader import load_ratings
from songrec.recommend import similar_users, recommend_songs

songs = SongTree()
users = UserTree()
tables = load_ratings("ratings.csv", songs, users)

for song in songs.top_n_bayesian(5):
    print(song.song_id, song.bayesian_average, song.average_rating, song.rating_count)

for similarity, user in similar_users(users, 42, threshold=50, limit=10):
    print(user.user_id, similarity)

for song_id, score in recommend_songs(users, 42, threshold=50, neighbours=10, count=5):
    print(song_id, score)
```

### Modules

- `songrec.stats`: `SongStats` holds a song's total, count, plain average and Bayesian average.
- `songrec.songtree`: `SongTree` is a B-tree of `SongStats` keyed by song id. It provides:
  - `insert`, `find_song` and `traverse`
  - `rated_songs` for the songs with at least one rating
  - `top_n_bayesian` and `bottom_n_bayesian`, which return copies of the entries
  - `load_csv`, which reads the same format as above but keeps every rating, including ratings that are not positive
- `songrec.users`: `Rating`, `UserData` and `UserTree`, an index of users and their ratings kept in the order they were given.
- `songrec.loader`: `load_ratings(path, song_tree, user_tree)` does the following:
  - skips ratings that are not positive
  - fills both trees
  - recomputes the Bayesian averages
  - returns a `RatingTables`, which holds `user_song_ratings` (user → song → rating) and `song_ratings` (song → list of ratings)
- `songrec.recommend`: `pearson`, `similar_neighbours`, `similar_users`, `recommend_songs` and `UserNotFoundError`.

### Bayesian average

Each rated song's Bayesian average is:

```
(count * average + confidence * global_average) / (count + confidence)
```

`global_average` is the mean of all ratings stored in the tree. The default confidence factor is 5. To change it and refresh the averages, call `SongTree.set_confidence_factor`.

### Similarity and recommendations

`pearson(a, b)` is the Pearson correlation of two users over the songs both have rated. It is 0.0 in two cases: when they share fewer than two songs, or when either user's ratings on those songs do not vary.

`similar_users` scores up to `threshold` other users taken from the user index next to the target. It returns up to `limit` `(similarity, user)` pairs, highest similarity first.

`recommend_songs` takes the `neighbours` most similar of those users. Each song the target has not rated gets a score: the sum of the neighbours' ratings, each multiplied by that neighbour's similarity. The function returns up to `count` `(song_id, score)` pairs, highest score first. When scores are equal, the higher song id comes first.

Both functions raise `UserNotFoundError`, a `LookupError`, when the user id is unknown.

## Limitations

- Everything is held in memory. Nothing is saved between runs.
- The only user interface is the text menu.