from collections.abc import Callable
from functools import lru_cache

import chex
import jax
import jax.numpy as jnp
import numpy as np
from termcolor import colored

from watersort.core.puzzle_base import Puzzle
from watersort.core.puzzle_state import FieldDescriptor, PuzzleState, state_dataclass
from watersort.utils.palette import EMPTY, color_label, color_rgb
from watersort.utils.util import coloring_bg_str

TYPE = jnp.uint8
CAPACITY = 4


def bottle_fill(bottles: chex.Array) -> chex.Array:
    """Number of occupied slots per bottle (last axis is the slot axis)."""
    return jnp.sum(bottles != EMPTY, axis=-1)


def pour_bottles(
    bottles: chex.Array, source: chex.Array, target: chex.Array
) -> tuple[chex.Array, chex.Array]:
    """Pour the top run of ``source`` onto ``target``.

    Bottles are stored bottom (slot 0) to top (slot ``CAPACITY - 1``) and are
    never sparse, so a bottle's fill level is also the index of its first free
    slot.

    Returns:
        ``(next_bottles, amount)``. ``amount`` is ``0`` and ``next_bottles`` is
        unchanged when the pour is illegal.
    """
    slots = jnp.arange(CAPACITY)
    source_row = bottles[source]
    target_row = bottles[target]
    source_fill = bottle_fill(source_row)
    target_fill = bottle_fill(target_row)

    source_top = source_row[jnp.maximum(source_fill - 1, 0)]
    target_top = target_row[jnp.maximum(target_fill - 1, 0)]

    # Length of the run of `source_top` at the top of the source bottle.
    occupied = slots < source_fill
    breaks = jnp.logical_and(occupied, source_row != source_top)
    last_break = jnp.max(jnp.where(breaks, slots, -1))
    run = source_fill - 1 - last_break

    space = CAPACITY - target_fill
    legal = (
        (source != target)
        & (source_fill > 0)
        & (space > 0)
        & ((target_fill == 0) | (target_top == source_top))
    )
    amount = jnp.where(legal, jnp.minimum(run, space), 0)

    next_source = jnp.where(slots >= source_fill - amount, TYPE(EMPTY), source_row)
    next_target = jnp.where(
        (slots >= target_fill) & (slots < target_fill + amount), source_top, target_row
    )
    next_bottles = bottles.at[source].set(next_source).at[target].set(next_target)
    return next_bottles, amount


def bottles_solved(bottles: chex.Array) -> chex.Array:
    """True iff every bottle is empty or full of a single color."""
    fill = bottle_fill(bottles)
    uniform = jnp.all(bottles == bottles[..., :1], axis=-1)
    sorted_bottles = (fill == 0) | ((fill == CAPACITY) & uniform)
    return jnp.all(sorted_bottles, axis=-1)


class WaterSort(Puzzle):
    """Water sort puzzle with a fixed number of four-slot bottles.

    The state is a ``(num_bottles, 4)`` array of color tags, bottom to top, with
    ``0`` marking an empty slot. Action ``a`` pours bottle ``a // num_bottles``
    into bottle ``a % num_bottles``; the diagonal (pouring a bottle into itself)
    is always invalid. A pour moves the longest same-colored run at the top of
    the source that fits into the target, and is only valid onto an empty
    bottle or onto the same color.

    The puzzle is solved when every bottle is either empty or holds four units
    of one color. A solved state has no valid actions, so moving a finished
    bottle into an empty one cannot happen after the win.

    Args:
        num_bottles: Number of bottles (at least one).
    """

    num_bottles: int

    def define_state_class(self) -> PuzzleState:
        """Defines the state class for WaterSort using xtructure."""
        str_parser = self.get_string_parser()
        num_bottles = self.num_bottles

        @state_dataclass
        class State:
            bottles: FieldDescriptor.tensor(dtype=TYPE, shape=(num_bottles, CAPACITY))

            def __str__(self, **kwargs):
                return str_parser(self, **kwargs)

        return State

    def __init__(self, num_bottles: int = 7, **kwargs):
        if num_bottles < 1:
            raise ValueError(f"WaterSort needs at least one bottle, got {num_bottles}")
        self.num_bottles = num_bottles
        self.action_size = num_bottles * num_bottles
        super().__init__(**kwargs)

    def from_bottles(self, bottles) -> "WaterSort.State":
        """Wrap a ``(num_bottles, 4)`` (or batched ``(..., num_bottles, 4)``) array."""
        return self.State(bottles=jnp.asarray(bottles, dtype=TYPE))

    def decode_action(self, action: int) -> tuple[int, int]:
        return int(action) // self.num_bottles, int(action) % self.num_bottles

    def encode_action(self, source: int, target: int) -> int:
        return int(source) * self.num_bottles + int(target)

    def get_actions(
        self,
        state: "WaterSort.State",
        action: chex.Array,
        filled: bool = True,
    ) -> tuple["WaterSort.State", chex.Array]:
        """
        This function returns the next state and cost for a given action.
        """
        source = action // self.num_bottles
        target = action % self.num_bottles
        next_bottles, amount = pour_bottles(state.bottles, source, target)
        # A won game is finished: no pour applies to it.
        playable = jnp.logical_not(bottles_solved(state.bottles))

        next_bottles, cost = jax.lax.cond(
            (amount > 0) & playable & filled,
            lambda: (next_bottles, 1.0),
            lambda: (state.bottles, jnp.inf),
        )
        return self.State(bottles=next_bottles), cost

    def is_solved(self, state: "WaterSort.State") -> bool:
        return bottles_solved(state.bottles)

    def action_to_string(self, action: int) -> str:
        """
        Bottles are numbered from 1 for display, as in the terminal game.
        """
        source, target = self.decode_action(action)
        return colored(f"{source + 1}→{target + 1}", "light_yellow")

    def get_string_parser(self) -> Callable:
        def slot_str(tag: int) -> str:
            if tag == EMPTY:
                return "   "
            return coloring_bg_str(f" {color_label(tag)} ", color_rgb(tag))

        def parser(state: "WaterSort.State", **kwargs):
            bottles = np.asarray(state.bottles)
            lines = []
            for slot in reversed(range(CAPACITY)):
                cells = [f"┃{slot_str(int(row[slot]))}┃" for row in bottles]
                lines.append(" ".join(cells))
            lines.append(" ".join("┗━━━┛" for _ in bottles))
            lines.append(" ".join(f"{idx + 1:^5d}" for idx in range(len(bottles))))
            return "\n".join(lines)

        return parser


@lru_cache(maxsize=None)
def get_puzzle(num_bottles: int) -> WaterSort:
    """Return the shared environment for ``num_bottles`` bottles.

    Environments are stateless, so one instance per bottle count is enough and
    its jit-compiled kernels are reused by every game and solver.
    """
    return WaterSort(num_bottles=num_bottles)
