from abc import ABC, abstractmethod
from collections.abc import Callable

import chex
import jax
import jax.numpy as jnp

from watersort.core.puzzle_state import PuzzleState


class Puzzle(ABC):
    """Abstract base class for watersort puzzle environments.

    An environment describes the rules of one puzzle *shape* (here: one bottle
    count). It owns no mutable game data; every method maps immutable states to
    new immutable states, which keeps it safe to share between an interactive
    session and any number of solver threads.

    Every concrete subclass must:

    1. Set ``action_size`` (number of possible actions).
    2. Implement :meth:`define_state_class` to return a ``@state_dataclass``-decorated class.
    3. Implement :meth:`get_actions`, :meth:`is_solved` and :meth:`get_string_parser`.

    The base class handles JIT compilation of core methods and provides
    default neighbour and batch logic.

    Attributes:
        action_size: Number of discrete actions available in this puzzle.
        State: The ``@state_dataclass`` class representing states (set during ``__init__``).
    """

    action_size: int = None

    class State(PuzzleState):
        pass

    @abstractmethod
    def define_state_class(self) -> PuzzleState:
        """Return the ``@state_dataclass`` class used for puzzle states.

        Subclasses **must** implement this method.  The returned class should
        use :class:`FieldDescriptor` to declare its fields.

        Returns:
            A ``@state_dataclass`` class describing the puzzle state.
        """
        pass

    def __init__(self, **kwargs):
        """Initialise the puzzle.

        Subclass constructors **must** call ``super().__init__(**kwargs)``
        after setting ``action_size`` and any instance attributes needed by
        :meth:`define_state_class`.

        This method:

        1. Builds the ``State`` class.
        2. JIT-compiles core methods (``get_actions``, ``get_neighbours``, ``is_solved``, ...).

        Raises:
            ValueError: If ``action_size`` is still ``None`` after subclass init.
        """
        super().__init__()
        if self.action_size is None:
            raise ValueError(
                f"{self.__class__.__name__} must define `action_size` before calling Puzzle.__init__"
            )

        self.State = self.define_state_class()

        self.get_actions = jax.jit(self.get_actions)
        self.get_neighbours = jax.jit(self.get_neighbours)
        self.batched_get_neighbours = jax.jit(self.batched_get_neighbours)
        self.is_solved = jax.jit(self.is_solved)
        self.batched_is_solved = jax.jit(self.batched_is_solved)

    @abstractmethod
    def get_string_parser(self) -> Callable:
        """Return a callable that renders a ``State`` as a human-readable string.

        Returns:
            A function ``(state: State, **kwargs) -> str``.
        """
        pass

    @abstractmethod
    def get_actions(
        self,
        state: State,
        action: chex.Array,
        filled: bool = True,
    ) -> tuple[State, chex.Array]:
        """Apply a single action to a state and return the result.

        Args:
            state: Current puzzle state.
            action: Scalar action index.
            filled: If ``False`` the action is treated as masked out.

        Returns:
            ``(next_state, cost)`` where invalid or masked actions return the
            unchanged state with ``cost = jnp.inf``.
        """
        pass

    def get_neighbours(
        self, state: State, filled: bool = True
    ) -> tuple[State, chex.Array]:
        """Compute all successor states for every action.

        Equivalent to calling :meth:`get_actions` for each action index and
        stacking the results.

        Args:
            state: Current puzzle state.
            filled: Forwarded to :meth:`get_actions`.

        Returns:
            ``(neighbour_states, costs)`` where ``neighbour_states`` has
            shape ``(action_size, ...)`` and ``costs`` has shape
            ``(action_size,)``.
        """
        actions = jnp.arange(self.action_size)
        states, costs = jax.vmap(
            self.get_actions, in_axes=(None, 0, None), out_axes=(0, 0)
        )(state, actions, filled)
        return states, costs

    def batched_get_neighbours(
        self, states: State, filled: bool = True
    ) -> tuple[State, chex.Array]:
        """Vectorised version of :meth:`get_neighbours`.

        Args:
            states: Batch of states with leading batch dimension.
            filled: Forwarded to :meth:`get_actions` for every state.

        Returns:
            ``(neighbour_states, costs)`` with shapes
            ``(action_size, batch, ...)`` and ``(action_size, batch)``.
        """
        return jax.vmap(self.get_neighbours, in_axes=(0, None), out_axes=(1, 1))(
            states, filled
        )

    @abstractmethod
    def is_solved(self, state: State) -> bool:
        """
        This function should return True if the state satisfies the goal condition.
        """
        pass

    def batched_is_solved(self, states: State) -> chex.Array:
        """Vectorised version of :meth:`is_solved`.

        Returns:
            Boolean array of shape ``(batch,)``.
        """
        return jax.vmap(self.is_solved)(states)

    def action_to_string(self, action: int) -> str:
        """Return a human-readable name for the given action index.

        Args:
            action: Integer action index in ``[0, action_size)``.

        Returns:
            String representation of the action.
        """
        return f"action {action}"

    def __repr__(self):
        state_fields = list(self.State.__annotations__.keys())
        return (
            f"Puzzle({self.__class__.__name__}, "
            f"action_size={self.action_size}, "
            f"state_fields={state_fields})"
        )
