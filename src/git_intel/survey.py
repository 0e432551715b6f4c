from typing import Sequence, Set

from .clone import CloneTask


def survey_tasks(tasks: Sequence[CloneTask]) -> Sequence[CloneTask]:
    if len(tasks) == 0:
        return []

    # survey reads the terminal on import
    from survey import routines

    # routines.basket returns the selected indexes, pyright sees None
    indexes: Set[int] = routines.basket(  # type: ignore
        f"select repos to clone ({len(tasks)}): ",
        options=map(str, tasks),
    )
    return [tasks[index] for index in sorted(indexes)]
