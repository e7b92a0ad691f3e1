"""Interactive menu over a ratings file."""

from __future__ import annotations

import argparse
import re
import sys
from collections import deque
from typing import TextIO

from .loader import load_ratings
from .recommend import UserNotFoundError, recommend_songs, similar_users
from .songtree import SongTree
from .users import UserTree

DEFAULT_CSV = "data/ratings_s.csv"

_INT = re.compile(r"[+-]?\d+")

_MENU = (
    "\n========= MENU PRINCIPAL =========\n"
    "1. Top N canciones (promedio bayesiano)\n"
    "2. Peores N canciones (promedio bayesiano)\n"
    "3. Mostrar usuarios similares\n"
    "4. Recomendaciones para un usuario\n"
    "0. Salir\n"
    "Seleccione una opcion: "
)


class _IntReader:
    """Reads whitespace-separated integers; after a failed read every read yields 0."""

    def __init__(self, stream: TextIO) -> None:
        self._stream = stream
        self._tokens: deque[str] = deque()
        self.failed = False

    def _next_token(self) -> str:
        while not self._tokens:
            line = self._stream.readline()
            if not line:
                return ""
            self._tokens.extend(line.split())
        return self._tokens.popleft()

    def read(self) -> int:
        if self.failed:
            return 0
        token = self._next_token()
        match = _INT.match(token)
        if match is None:
            self.failed = True
            return 0
        rest = token[match.end():]
        if rest:
            self._tokens.appendleft(rest)
        return int(match.group())


def _prompt(reader: _IntReader, text: str) -> int:
    print(text, end="", flush=True)
    return reader.read()


def _print_songs(songs, marker: str) -> None:
    for song in songs:
        print(
            f"{marker} Cancion {song.song_id}"
            f" | Bayesiano: {song.bayesian_average:g}"
            f" | Promedio: {song.average_rating:g}"
            f" | Votos: {song.rating_count}"
        )


def _show_similar(users: UserTree, user_id: int, threshold: int) -> None:
    try:
        ranked = similar_users(users, user_id, threshold)
    except UserNotFoundError:
        print("Usuario no encontrado.")
        return
    print(f"\nUsuarios mas similares al usuario {user_id}:")
    for similarity, user in ranked:
        print(f"Usuario {user.user_id} con similitud {similarity:g}")


def _show_recommendations(users: UserTree, user_id: int, threshold: int) -> None:
    try:
        ranked = recommend_songs(users, user_id, threshold)
    except UserNotFoundError:
        print("Usuario no encontrado.")
        return
    print(f"\nRecomendaciones para el usuario {user_id}:")
    for song_id, score in ranked:
        print(f"Cancion {song_id} con score {score:g}")


def main(argv: list[str] | None = None) -> int:
    """Load the ratings file and run the menu until the user exits."""
    parser = argparse.ArgumentParser(
        prog="songrec", description="Song rankings and recommendations from a ratings CSV."
    )
    parser.add_argument("csv", nargs="?", default=DEFAULT_CSV, help="ratings file")
    args = parser.parse_args(argv)

    songs = SongTree()
    users = UserTree()
    try:
        load_ratings(args.csv, songs, users)
    except OSError:
        print("❌ No se pudo abrir el archivo CSV.", file=sys.stderr)
    songs.calculate_all_bayesian_averages()

    reader = _IntReader(sys.stdin)
    while True:
        option = _prompt(reader, _MENU)
        if option == 1:
            n = _prompt(reader, "Cuantas canciones deseas ver?: ")
            _print_songs(songs.top_n_bayesian(n), "🎵")
        elif option == 2:
            n = _prompt(reader, "Cuantas canciones peores deseas ver?: ")
            _print_songs(songs.bottom_n_bayesian(n), "🔻")
        elif option in (3, 4):
            user_id = _prompt(reader, "Ingrese ID del usuario: ")
            threshold = _prompt(reader, "Ingrese el umbral de vecinos a considerar: ")
            if option == 3:
                _show_similar(users, user_id, threshold)
            else:
                _show_recommendations(users, user_id, threshold)
        elif option == 0:
            print("Saliendo del sistema...")
            return 0
        else:
            print("❌ Opcion no valida.")


if __name__ == "__main__":
    sys.exit(main())