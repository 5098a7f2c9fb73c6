from __future__ import annotations

from typing import Any, Type, TypeVar

import jax
import numpy as np
from xtructure import FieldDescriptor, Xtructurable, xtructure_dataclass

T = TypeVar("T")

FieldDescriptor = FieldDescriptor


class PuzzleState(Xtructurable):
    """
    Marker base-class for watersort states.

    Notes:
    - State classes are created per environment via `@state_dataclass`, because
      their tensor shapes depend on the bottle count chosen at runtime.
    - Instances are immutable JAX pytrees; every transition builds a new state.
    """
    pass


def state_dataclass(cls: Type[T] | None = None, **kwargs: Any):
    """
    Decorator used to define a JAX-compatible xtructure dataclass for watersort states.

    Default behavior:
    - Disables xtructure bitpacking (`bitpack="off"`); bottle tensors are small and
      the solver hashes raw bytes on the host.
    - Adds `host_fields()`, returning a dict of host-side numpy copies of every field,
      which is how states cross from the jitted kernels into Python bookkeeping.
    """

    def wrap(target_cls: Type[T]) -> Type[T]:
        call_kwargs = dict(kwargs)
        call_kwargs.setdefault("bitpack", "off")

        try:
            dc_cls = xtructure_dataclass(target_cls, **call_kwargs)
        except TypeError:
            # Older xtructure releases do not accept `bitpack=`.
            call_kwargs.pop("bitpack", None)
            dc_cls = xtructure_dataclass(target_cls, **call_kwargs)

        def host_fields(self) -> dict[str, np.ndarray]:
            fields = {}
            for name in target_cls.__annotations__.keys():
                fields[name] = np.asarray(jax.device_get(getattr(self, name)))
            return fields

        setattr(dc_cls, "host_fields", host_fields)
        return dc_cls

    if cls is None:
        return wrap
    return wrap(cls)
