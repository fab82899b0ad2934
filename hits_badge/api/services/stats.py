from __future__ import annotations

from itertools import groupby
from operator import attrgetter
from typing import Iterable

from hits_badge.api.storage import CounterStore, RepoCount, UserRepoCount


def list_repo_counts(store: CounterStore, user: str) -> list[RepoCount]:
    """Contadores de un usuario, ordenados por repo. Lista vacía si no tiene ninguno."""
    return [RepoCount(repo=row.repo, count=row.count) for row in store.scan(user)]


def list_all_counts(store: CounterStore) -> list[UserRepoCount]:
    """Todos los contadores, ordenados por (user, repo)."""
    return store.scan()


def repo_counts_payload(user: str, rows: Iterable[RepoCount]) -> dict[str, dict[str, int]]:
    return {user: {row.repo: row.count for row in rows}}


def group_by_user(rows: Iterable[UserRepoCount]) -> dict[str, dict[str, int]]:
    """
    Agrupa filas ya ordenadas por user.

    `groupby` solo agrupa claves contiguas: el orden de `list_all_counts` es
    precondición.
    """
    out: dict[str, dict[str, int]] = {}
    for user, group in groupby(rows, key=attrgetter("user")):
        out[user] = {row.repo: row.count for row in group}
    return out
