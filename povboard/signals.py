"""
Signals for povboard.

Declare a signal with the ``@signal`` decorator; each instance gets its own
Signal object that callbacks can connect to. Calling the signal emits it.

Usage:
    class Board:
        @signal
        def stages_changed(self, stages: list) -> None:
            '''Emitted when the displayed stages change.'''

    board = Board()
    board.stages_changed.connect(render)
    board.stages_changed(stages)
"""
import inspect
import weakref
from typing import Any, Callable, List


class SignalError(Exception):
    """Exception raised for signal-related errors."""
    pass


def _positional_arity(func: Callable, skip_self: bool) -> int | None:
    """Count the positional parameters of func, or None if it takes *args."""
    try:
        params = list(inspect.signature(func).parameters.values())
    except (ValueError, TypeError):
        return None
    if skip_self and params and params[0].name == "self":
        params = params[1:]
    count = 0
    for p in params:
        if p.kind == inspect.Parameter.VAR_POSITIONAL:
            return None
        if p.kind in (inspect.Parameter.POSITIONAL_ONLY, inspect.Parameter.POSITIONAL_OR_KEYWORD):
            count += 1
    return count


class Signal:
    """
    A signal that callbacks can be connected to.

    Callbacks must accept as many positional arguments as the declaring
    method does (excluding ``self``).
    """

    def __init__(self, name: str = "", declaration: Any = None) -> None:
        self.name = name
        self._callbacks: List[Callable] = []
        self._arity = _positional_arity(declaration, skip_self=True) if declaration else None

    def connect(self, callback: Callable) -> None:
        """
        Connect a callback to this signal.

        Raises:
            SignalError: If the callback takes a different number of arguments.
        """
        if callback in self._callbacks:
            return

        if self._arity is not None:
            arity = _positional_arity(callback, skip_self=False)
            if arity is not None and arity != self._arity:
                raise SignalError(
                    f"Callback for signal '{self.name}' takes {arity} arguments, "
                    f"but the signal passes {self._arity}."
                )

        self._callbacks.append(callback)

    def disconnect(self, callback: Callable) -> None:
        """Disconnect a callback from this signal."""
        if callback in self._callbacks:
            self._callbacks.remove(callback)

    def disconnect_all(self) -> None:
        """Disconnect all callbacks from this signal."""
        self._callbacks.clear()

    def emit(self, *args, **kwargs) -> None:
        """Call every connected callback with the given arguments."""
        for callback in list(self._callbacks):
            callback(*args, **kwargs)

    def __call__(self, *args, **kwargs) -> None:
        self.emit(*args, **kwargs)

    def is_connected(self, callback: Callable) -> bool:
        """Check if a callback is connected to this signal."""
        return callback in self._callbacks


class SignalDescriptor:
    """Descriptor handing out one Signal per owning instance."""

    def __init__(self, name: str, declaration: Any = None) -> None:
        self.name = name
        self.declaration = declaration
        self._signals: "weakref.WeakKeyDictionary[Any, Signal]" = weakref.WeakKeyDictionary()

    def __get__(self, obj, objtype=None):
        if obj is None:
            return self
        sig = self._signals.get(obj)
        if sig is None:
            sig = Signal(name=self.name, declaration=self.declaration)
            self._signals[obj] = sig
        return sig

    def __set__(self, obj, value) -> None:
        raise SignalError(f"Cannot reassign signal '{self.name}'")


def signal(func: Callable) -> SignalDescriptor:
    """
    Declare a method as a signal.

    The method body is never run; its signature fixes how many arguments
    connected callbacks receive.
    """
    return SignalDescriptor(name=func.__name__, declaration=func)
