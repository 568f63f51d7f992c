"""
Mixin classes for gridstream abstract components.

Classes:
    CopyMixin(ABC):
        A mixin class that provides a fast copy method for classes that inherit it.
        Attributes listed in ``_copy_only_reference`` are shared between the
        original and the copy (for example an immutable ordering table), the
        rest are copied shallowly or deeply.

Usage:
    Mixin classes are typically used in multiple inheritance scenarios:

    from gridstream.abstract.mixin import CopyMixin

    class MyStreamer(SomeBaseClass, CopyMixin):
        _copy_only_reference = ["_table"]

        def __init__(self, table):
            self._table = table
            self._loaded = {}
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from copy import copy, deepcopy
from typing import Self

from beartype import beartype


@beartype
class CopyMixin(ABC):
    """A mixin class that provides a fast copy method for the class that inherits it."""

    _copy_only_reference: list[str] = ["_table"]

    @abstractmethod
    def __init__(self): ...

    def copy(self, deep: bool = False, memo: dict | None = None) -> Self:
        """Create a copy of the object.

        Parameters
        ----------
        deep : bool, optional
            If True, attributes are copied recursively. If False, only the
            top-level attributes are copied. Attributes named in
            ``_copy_only_reference`` are shared either way. Defaults to False.
        memo : dict | None, optional
            The memo of an enclosing deep copy. Defaults to None.

        Returns
        -------
        Self
            A new instance of the class that is a copy of this one.
        """
        cls = self.__class__
        obj = cls.__new__(cls)
        if deep:
            memo = {} if memo is None else memo
            memo[id(self)] = obj
        for k, v in self.__dict__.items():
            if k in self._copy_only_reference:
                setattr(obj, k, v)
            elif deep:
                setattr(obj, k, deepcopy(v, memo))
            else:
                setattr(obj, k, copy(v))
        return obj

    def __copy__(self) -> Self:
        """Create a shallow copy.

        Returns
        -------
        Self
            A shallow copy of the object.
        """
        return self.copy(deep=False)

    def __deepcopy__(self, memo: dict) -> Self:
        """Create a deep copy.

        Parameters
        ----------
        memo : dict
            A dictionary to store the copied objects.

        Returns
        -------
        Self
            A deep copy of the object.
        """
        return self.copy(deep=True, memo=memo)
