"""
Result envelope for file operations.

Every read in file-spine concludes as a ``Result[T]``: ``Ok(value)`` when the
file was read and decoded, ``Err(error)`` when it was missing, unreadable or
malformed. Callers (and the batch orchestrator) consume one shape regardless
of format, and expected failures never surface as exceptions the caller
forgot to catch.

Manifesto:
    - **Explicit over Implicit:** A read returns its failure, it does not raise it
    - **Propagation without wrapping:** ``Err.map`` keeps the identical error
      object, so the original traceback and identity survive a chain
    - **Exhaustive matching:** ``Result`` is the closed union ``Ok | Err``;
      ``match`` with ``case Ok(v)`` / ``case Err(e)`` covers every outcome
    - **Batch-friendly:** ``partition_results`` splits a batch into values
      and errors for reporting

Architecture:
    ::

        ┌─────────────────────────────────────────────────────────────┐
        │                     Result[T]                                │
        │                    (Type Alias)                              │
        ├─────────────────┬─────────────────┬─────────────────────────┤
        │     Ok[T]       │     Err[T]      │     Utilities           │
        │   (Success)     │   (Failure)     │                         │
        ├─────────────────┼─────────────────┼─────────────────────────┤
        │ • value: T      │ • error: Exc    │ • success() / failure() │
        │ • map()         │ • map_err()     │ • try_result()          │
        │ • flat_map()    │ • or_else()     │ • collect_results()     │
        │ • get_value()   │ • get_error()   │ • partition_results()   │
        └─────────────────┴─────────────────┴─────────────────────────┘

Examples:
    >>> from filespine.core.result import Ok, Err, Result
    >>> def parse_port(raw: str) -> Result[int]:
    ...     if not raw.isdigit():
    ...         return Err(ValueError(f"not a port: {raw!r}"))
    ...     return Ok(int(raw))
    >>> match parse_port("8080"):
    ...     case Ok(value):
    ...         print(f"port {value}")
    ...     case Err(error):
    ...         print(f"error {error}")
    port 8080

    Failures pass through ``map`` untouched:

    >>> cause = ValueError("boom")
    >>> Err(cause).map(lambda x: x * 2).error is cause
    True

Guardrails:
    ❌ DON'T: Rely on ``map`` to catch exceptions raised by the mapping function
    ✅ DO: Return ``Err`` from a ``flat_map`` function when the step can fail

    ❌ DON'T: Use ``get_value() is None`` to detect failure (``Ok(None)`` is valid)
    ✅ DO: Check ``is_ok()`` / ``is_err()`` or pattern-match

Tags:
    result-pattern, error-handling, functional-programming, file-spine

Doc-Types:
    - API Reference
    - Error Handling Guide
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Generic, TypeVar

from filespine.core.errors import FileSpineError


T = TypeVar("T")
U = TypeVar("U")


@dataclass(frozen=True, slots=True)
class Ok(Generic[T]):
    """
    Successful result containing a value.

    The value may be ``None``: presence is carried by the variant, not by the
    value. ``map`` applies the function directly, so an exception raised by
    the function propagates to the caller instead of becoming an ``Err``.

    Examples:
        >>> Ok(10).map(lambda x: x * 2).unwrap()
        20
        >>> Ok(None).is_ok()
        True
    """

    value: T

    def is_ok(self) -> bool:
        return True

    def is_err(self) -> bool:
        return False

    def get_value(self) -> T | None:
        """The contained value."""
        return self.value

    def get_error(self) -> BaseException | None:
        """Always ``None`` for Ok."""
        return None

    def unwrap(self) -> T:
        """Get the value. Safe for Ok."""
        return self.value

    def unwrap_or(self, default: T) -> T:
        """Get value or default (always returns value for Ok)."""
        return self.value

    def unwrap_or_else(self, f: Callable[[BaseException], T]) -> T:
        """Get value or call f with error (always returns value for Ok)."""
        return self.value

    def map(self, f: Callable[[T], U]) -> Result[U]:
        """Transform the value. Exceptions raised by ``f`` are not caught."""
        return Ok(f(self.value))

    def flat_map(self, f: Callable[[T], Result[U]]) -> Result[U]:
        """Chain to another Result-returning function."""
        return f(self.value)

    def and_then(self, f: Callable[[T], Result[U]]) -> Result[U]:
        """Alias for flat_map."""
        return f(self.value)

    def map_err(self, f: Callable[[BaseException], BaseException]) -> Result[T]:
        """Transform error if Err (no-op for Ok)."""
        return self

    def or_else(self, f: Callable[[BaseException], Result[T]]) -> Result[T]:
        """Return self if Ok, otherwise call f with error."""
        return self

    def inspect(self, f: Callable[[T], None]) -> Result[T]:
        """Call f with value for side effects, return self."""
        f(self.value)
        return self

    def inspect_err(self, f: Callable[[BaseException], None]) -> Result[T]:
        """Call f with error for side effects (no-op for Ok)."""
        return self

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {"ok": True, "value": self.value}

    def __repr__(self) -> str:
        return f"Ok({self.value!r})"


@dataclass(frozen=True, slots=True)
class Err(Generic[T]):
    """
    Failed result containing an error.

    The error must be an exception instance; ``Err(None)`` raises
    ``TypeError`` rather than producing a result that looks like nothing
    went wrong.

    Transformations short-circuit: ``map``/``flat_map`` return a new Err
    holding the *same* error object, without calling the function.

    Examples:
        >>> err = Err(ValueError("bad"))
        >>> err.unwrap_or("default")
        'default'
        >>> err.map(str.upper).is_err()
        True
    """

    error: BaseException

    def __post_init__(self) -> None:
        if not isinstance(self.error, BaseException):
            raise TypeError(
                f"Err requires an exception instance, got {type(self.error).__name__}"
            )

    def is_ok(self) -> bool:
        return False

    def is_err(self) -> bool:
        return True

    def get_value(self) -> T | None:
        """Always ``None`` for Err."""
        return None

    def get_error(self) -> BaseException | None:
        """The contained error."""
        return self.error

    def unwrap(self) -> T:
        """Raise the error. Use only when you're sure it's Ok."""
        raise self.error

    def unwrap_or(self, default: T) -> T:
        """Get default since this is Err."""
        return default

    def unwrap_or_else(self, f: Callable[[BaseException], T]) -> T:
        """Call f with error to get value."""
        return f(self.error)

    def map(self, f: Callable[[T], U]) -> Result[U]:
        """No-op for Err; the error object is carried over unchanged."""
        return Err(self.error)

    def flat_map(self, f: Callable[[T], Result[U]]) -> Result[U]:
        """No-op for Err."""
        return Err(self.error)

    def and_then(self, f: Callable[[T], Result[U]]) -> Result[U]:
        """No-op for Err."""
        return Err(self.error)

    def map_err(self, f: Callable[[BaseException], BaseException]) -> Result[T]:
        """Transform the error."""
        return Err(f(self.error))

    def or_else(self, f: Callable[[BaseException], Result[T]]) -> Result[T]:
        """Call f with error to try recovery."""
        return f(self.error)

    def inspect(self, f: Callable[[T], None]) -> Result[T]:
        """No-op for Err."""
        return self

    def inspect_err(self, f: Callable[[BaseException], None]) -> Result[T]:
        """Call f with error for side effects, return self."""
        f(self.error)
        return self

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        if isinstance(self.error, FileSpineError):
            return {"ok": False, "error": self.error.to_dict()}
        return {
            "ok": False,
            "error": {
                "error_type": type(self.error).__name__,
                "message": str(self.error),
            },
        }

    def __repr__(self) -> str:
        return f"Err({self.error!r})"


# Type alias for Result
Result = Ok[T] | Err[T]


# =============================================================================
# RESULT CONSTRUCTORS AND UTILITIES
# =============================================================================


def success(value: T) -> Result[T]:
    """Build a successful result. Never fails; ``value`` may be ``None``."""
    return Ok(value)


def failure(cause: BaseException) -> Result[Any]:
    """
    Build a failed result.

    Raises:
        TypeError: If ``cause`` is ``None`` or not an exception instance
    """
    return Err(cause)


def try_result(f: Callable[[], T]) -> Result[T]:
    """
    Execute a zero-argument function and wrap the outcome.

    Returns ``Ok`` with the return value, or ``Err`` with the raised
    exception.

    Examples:
        >>> import json
        >>> try_result(lambda: json.loads('{"a": 1}')).unwrap()
        {'a': 1}
        >>> try_result(lambda: json.loads('invalid')).is_err()
        True
    """
    try:
        return Ok(f())
    except Exception as e:
        return Err(e)


def collect_results(results: list[Result[T]]) -> Result[list[T]]:
    """
    Collect a list of Results into a Result of list (fail-fast).

    Returns the first Err encountered, or Ok with every value in order.

    Examples:
        >>> collect_results([Ok(1), Ok(2)]).unwrap()
        [1, 2]
        >>> str(collect_results([Ok(1), Err(ValueError("a"))]).error)
        'a'
    """
    values = []
    for result in results:
        match result:
            case Ok(value):
                values.append(value)
            case Err(error):
                return Err(error)
    return Ok(values)


def partition_results(
    results: list[Result[T]],
) -> tuple[list[T], list[BaseException]]:
    """
    Partition results into successes and failures.

    Examples:
        >>> values, errors = partition_results([Ok(1), Err(ValueError("a")), Ok(2)])
        >>> values
        [1, 2]
        >>> len(errors)
        1
    """
    values = []
    errors = []
    for result in results:
        match result:
            case Ok(value):
                values.append(value)
            case Err(error):
                errors.append(error)
    return values, errors


__all__ = [
    # Types
    "Result",
    "Ok",
    "Err",
    # Constructors
    "success",
    "failure",
    "try_result",
    # Collectors
    "collect_results",
    "partition_results",
]
