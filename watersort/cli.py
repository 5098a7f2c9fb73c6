"""Command line front end for watersort.

Example::

    watersort levels
    watersort solve classic --max-moves 20
    watersort play terminal

``play`` is the terminal version of the game: bottles are numbered from 1 and a
move is typed as ``FROM TO``.
"""

from __future__ import annotations

import logging

import click
from tabulate import tabulate
from termcolor import colored

from watersort.errors import ConfigurationError
from watersort.game import WaterSorting, replay
from watersort.levels import Level, available_levels, load_level
from watersort.solver import DEFAULT_MAX_MOVES, SolveResult, SolverConfig, WaterSolver

PLAY_HELP = "Moves: 'FROM TO' (e.g. '1 3'), u = undo, r = restart, s = solve, q = quit"


def _load(level_name: str) -> Level:
    try:
        return load_level(level_name)
    except (FileNotFoundError, ConfigurationError) as exc:
        raise click.BadParameter(str(exc), param_hint="LEVEL") from exc


def _solution_table(result: SolveResult) -> str:
    rows = [
        (step, move.source + 1, move.target + 1)
        for step, move in enumerate(result.solution, start=1)
    ]
    return tabulate(rows, headers=["Step", "From", "To"], tablefmt="simple")


def _report(result: SolveResult) -> None:
    if result.solved:
        click.echo(
            colored(f"Solved in {len(result.solution)} moves", "green")
            + f" ({result.explored} states explored)"
        )
        if len(result.solution):
            click.echo(_solution_table(result))
    else:
        reason = " (state limit reached)" if result.truncated else ""
        click.echo(colored(f"No solution found in {result.max_moves} moves{reason}", "red"))


@click.group()
@click.option(
    "--log-level",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
    default="WARNING",
    show_default=True,
    help="Logging verbosity.",
)
def main(log_level: str) -> None:
    """Water sort puzzle: play in the terminal or solve a level."""
    logging.basicConfig(
        level=getattr(logging, log_level.upper()),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


@main.command("levels")
def list_levels() -> None:
    """List the bundled levels."""
    rows = []
    for name in available_levels():
        level = load_level(name)
        colors = len({color for bottle in level.bottles for color in bottle})
        rows.append((name, len(level.bottles), colors, level.description))
    click.echo(tabulate(rows, headers=["Level", "Bottles", "Colors", "Description"]))


@main.command("solve")
@click.argument("level_name", metavar="LEVEL")
@click.option("--max-moves", default=DEFAULT_MAX_MOVES, show_default=True, help="Move budget.")
@click.option(
    "--max-states",
    default=SolverConfig.max_states,
    show_default=True,
    help="Give up after this many distinct states.",
)
@click.option(
    "--batch-size",
    default=SolverConfig.batch_size,
    show_default=True,
    help="States expanded per vectorised step.",
)
@click.option("--progress/--no-progress", default=True, help="Show a progress bar.")
def solve_level(
    level_name: str, max_moves: int, max_states: int, batch_size: int, progress: bool
) -> None:
    """Solve LEVEL (a bundled level name or a JSON file)."""
    level = _load(level_name)
    game = level.new_game()
    click.echo(str(game))
    try:
        config = SolverConfig(max_moves=max_moves, max_states=max_states, batch_size=batch_size)
    except ValueError as exc:
        raise click.BadParameter(str(exc)) from exc
    result = WaterSolver(game, config).solution(progress=progress)
    _report(result)


def _parse_move(text: str, bottle_count: int) -> tuple[int, int] | None:
    parts = text.replace(",", " ").split()
    if len(parts) != 2 or not all(part.isdigit() for part in parts):
        return None
    source, target = (int(part) - 1 for part in parts)
    if not (0 <= source < bottle_count and 0 <= target < bottle_count):
        return None
    return source, target


@main.command("play")
@click.argument("level_name", metavar="LEVEL")
@click.option("--max-moves", default=DEFAULT_MAX_MOVES, show_default=True, help="Move budget for 's'.")
@click.option("--delay", default=1.0, show_default=True, help="Seconds between replayed moves.")
def play(level_name: str, max_moves: int, delay: float) -> None:
    """Play LEVEL interactively."""
    level = _load(level_name)
    game = level.new_game()
    click.echo(PLAY_HELP)

    while True:
        click.echo()
        click.echo(str(game))
        if game.win():
            click.echo(colored("You Won!", "green", attrs=["bold"]))
            break

        command = click.prompt("Move", default="", show_default=False).strip().lower()
        if command in ("q", "quit"):
            break
        if command in ("u", "undo"):
            if not game.undo():
                click.echo("Nothing to undo.")
            continue
        if command in ("r", "restart"):
            game.reset()
            level.apply(game)
            continue
        if command in ("s", "solve"):
            _auto_solve(game, max_moves, delay)
            continue

        move = _parse_move(command, game.bottle_count())
        if move is None:
            click.echo(PLAY_HELP)
            continue
        click.echo("Pouring...")
        if not game.pour(*move):
            click.echo(colored("That pour is not possible.", "yellow"))


def _auto_solve(game: WaterSorting, max_moves: int, delay: float) -> None:
    result = WaterSolver(game).solution(max_moves, progress=True)
    _report(result)
    if not result.solved:
        return

    def show(index, source, target, applied):
        click.echo(f"{index + 1}. {source + 1} -> {target + 1}")
        click.echo(str(game))

    replay(game, result.solution, delay=delay, on_step=show)


if __name__ == "__main__":
    main()
