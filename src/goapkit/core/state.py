"""Typed world-state representation used as search nodes by the planner."""

from __future__ import annotations

import math
from decimal import ROUND_HALF_UP, Decimal
from enum import Enum
from operator import itemgetter
from typing import TYPE_CHECKING, Any, TypeVar, cast

from pydantic import BaseModel, ConfigDict, Field, StrictBool, StrictInt, StrictStr, model_validator

from .errors import IncompatibleStateTypes

if TYPE_CHECKING:  # pragma: no cover - typing helpers only
    from collections.abc import Callable, Mapping

DECIMAL_SCALE = 1000

_T = TypeVar("_T")


def from_float(value: float) -> int:
    """Encode ``value`` as a fixed-point integer with three decimal places.

    The product ``value * 1000`` is rounded half away from zero without going
    through another float addition, so large magnitudes stay exact. Products too
    large for a float are scaled as integers instead.

    Raises:
        ValueError: If ``value`` is NaN or infinite.

    """
    if not math.isfinite(value):
        msg = f"Cannot encode non-finite value {value!r} as a decimal state variable."
        raise ValueError(msg)
    scaled = value * DECIMAL_SCALE
    if not math.isfinite(scaled):
        # floats this large are whole numbers
        return int(value) * DECIMAL_SCALE
    return int(Decimal(scaled).to_integral_value(rounding=ROUND_HALF_UP))


def to_float(scaled: int) -> float:
    """Decode a fixed-point integer produced by :func:`from_float`."""
    return scaled / DECIMAL_SCALE


class VarKind(str, Enum):
    """Variant tag of a :class:`StateVar`."""

    boolean = "bool"
    integer = "integer"
    decimal = "decimal"
    text = "text"


_PAYLOAD_TYPES: dict[VarKind, type] = {
    VarKind.boolean: bool,
    VarKind.integer: int,
    VarKind.decimal: int,
    VarKind.text: str,
}


class StateVar(BaseModel):
    """A single tagged world-state value.

    Decimal variables store their value as an integer scaled by
    :data:`DECIMAL_SCALE`, which keeps equality and hashing exact.
    """

    kind: VarKind
    raw: StrictBool | StrictInt | StrictStr

    model_config = ConfigDict(frozen=True, extra="forbid")

    @model_validator(mode="after")
    def _check_payload(self) -> StateVar:
        expected = _PAYLOAD_TYPES[self.kind]
        # bool is a subclass of int, so compare the concrete type.
        if type(self.raw) is not expected:
            msg = f"{self.kind.value} state variables require a {expected.__name__} payload"
            raise ValueError(msg)
        return self

    @classmethod
    def boolean(cls, value: bool) -> StateVar:
        """Create a boolean variable."""
        return cls(kind=VarKind.boolean, raw=value)

    @classmethod
    def integer(cls, value: int) -> StateVar:
        """Create an integer variable."""
        return cls(kind=VarKind.integer, raw=value)

    @classmethod
    def decimal(cls, value: float) -> StateVar:
        """Create a decimal variable from a float, rounded to three places."""
        return cls(kind=VarKind.decimal, raw=from_float(value))

    @classmethod
    def decimal_raw(cls, scaled: int) -> StateVar:
        """Create a decimal variable from an already scaled integer."""
        return cls(kind=VarKind.decimal, raw=scaled)

    @classmethod
    def text(cls, value: str) -> StateVar:
        """Create a text variable."""
        return cls(kind=VarKind.text, raw=value)

    @classmethod
    def of(cls, value: StateValue) -> StateVar:
        """Coerce a plain Python value into a :class:`StateVar`.

        ``bool`` maps to a boolean, ``int`` to an integer, ``float`` to a decimal,
        ``str`` to text and enum members go through :func:`enum_to_state_var`.
        """
        if isinstance(value, StateVar):
            return value
        if isinstance(value, bool):
            return cls.boolean(value)
        if isinstance(value, Enum):
            return enum_to_state_var(value)
        if isinstance(value, int):
            return cls.integer(value)
        if isinstance(value, float):
            return cls.decimal(value)
        if isinstance(value, str):
            return cls.text(value)
        msg = f"Unsupported state value type: {type(value).__name__}"
        raise TypeError(msg)

    @property
    def is_numeric(self) -> bool:
        """Return ``True`` for integer and decimal variables."""
        return self.kind in (VarKind.integer, VarKind.decimal)

    def as_bool(self) -> bool | None:
        """Return the boolean payload, or ``None`` for other kinds."""
        return cast("bool", self.raw) if self.kind is VarKind.boolean else None

    def as_int(self) -> int | None:
        """Return the integer payload, or ``None`` for other kinds."""
        return cast("int", self.raw) if self.kind is VarKind.integer else None

    def as_float(self) -> float | None:
        """Return the decoded decimal payload, or ``None`` for other kinds."""
        return to_float(cast("int", self.raw)) if self.kind is VarKind.decimal else None

    def as_text(self) -> str | None:
        """Return the text payload, or ``None`` for other kinds."""
        return cast("str", self.raw) if self.kind is VarKind.text else None

    def distance(self, other: StateVar) -> int:
        """Return how far this value is from ``other``.

        Booleans and text contribute ``0`` when equal and ``1`` otherwise; integers
        and decimals contribute the absolute difference of their raw integers.

        Raises:
            IncompatibleStateTypes: If the two variables are of different kinds.

        """
        if self.kind is not other.kind:
            raise IncompatibleStateTypes(self.kind, other.kind)
        if self.is_numeric:
            return abs(cast("int", self.raw) - cast("int", other.raw))
        return 0 if self.raw == other.raw else 1

    def meets(self, required: StateVar) -> bool:
        """Return ``True`` when this value satisfies ``required``.

        Numeric kinds are thresholds (``self >= required``); booleans and text
        require equality. Different kinds never satisfy each other.
        """
        if self.kind is not required.kind:
            return False
        if self.is_numeric:
            return cast("int", self.raw) >= cast("int", required.raw)
        return self.raw == required.raw

    def shifted(self, delta: int) -> StateVar:
        """Return a copy of a numeric variable with ``delta`` added to its raw value."""
        return self.model_copy(update={"raw": cast("int", self.raw) + delta})

    def __str__(self) -> str:
        """Render the value the way it reads in plan output."""
        if self.kind is VarKind.boolean:
            return "true" if self.raw else "false"
        if self.kind is VarKind.decimal:
            return f"{to_float(cast('int', self.raw)):.3f}"
        return str(self.raw)


StateValue = bool | int | float | str | Enum | StateVar


def enum_to_state_var(member: Enum) -> StateVar:
    """Convert an enum member into a text variable.

    String-valued members use their value; other members use their lower-cased
    name, so ``Location.TOWN`` becomes ``"town"``.
    """
    if isinstance(member.value, str):
        return StateVar.text(member.value)
    return StateVar.text(member.name.lower())


class EffectKind(str, Enum):
    """Operations an action can perform on a state variable."""

    set = "set"
    add = "add"
    subtract = "subtract"


class EffectOp(BaseModel):
    """A single effect applied to one state variable.

    ``add`` and ``subtract`` amounts are raw integers; for decimal targets they are
    expressed in thousandths (use a float delta in :meth:`add` to have it scaled).
    """

    kind: EffectKind
    value: StateVar | None = None
    amount: StrictInt = 0

    model_config = ConfigDict(frozen=True, extra="forbid")

    @model_validator(mode="after")
    def _check_operands(self) -> EffectOp:
        if self.kind is EffectKind.set and self.value is None:
            msg = "set effects require a value"
            raise ValueError(msg)
        if self.kind is not EffectKind.set and self.value is not None:
            msg = f"{self.kind.value} effects take an amount, not a value"
            raise ValueError(msg)
        return self

    @classmethod
    def set_to(cls, value: StateValue) -> EffectOp:
        """Create an effect replacing the variable with ``value``."""
        return cls(kind=EffectKind.set, value=StateVar.of(value))

    @classmethod
    def add(cls, delta: int | float) -> EffectOp:
        """Create an effect adding ``delta``; float deltas are scaled to thousandths."""
        return cls(kind=EffectKind.add, amount=_scaled_delta(delta))

    @classmethod
    def subtract(cls, delta: int | float) -> EffectOp:
        """Create an effect subtracting ``delta``; float deltas are scaled to thousandths."""
        return cls(kind=EffectKind.subtract, amount=_scaled_delta(delta))

    def describe(self, name: str) -> str:
        """Describe the effect on the variable ``name``."""
        if self.kind is EffectKind.set:
            return f"Set {name} to {self.value}"
        if self.kind is EffectKind.add:
            return f"Add {self.amount} to {name}"
        return f"Subtract {self.amount} from {name}"


def _scaled_delta(delta: int | float) -> int:
    if isinstance(delta, float):
        return from_float(delta)
    return delta


class WorldState(BaseModel):
    """A mapping of variable names to :class:`StateVar` values.

    Equality and hashing ignore insertion order, so two states holding the same
    variables collapse into one search node. States are mutable while they are
    being assembled; once a state is handed to the planner it must not change.
    """

    variables: dict[str, StateVar] = Field(default_factory=dict)

    model_config = ConfigDict(extra="forbid")

    @classmethod
    def from_values(cls, values: Mapping[str, StateValue]) -> WorldState:
        """Build a state from plain Python values."""
        return cls(variables={str(name): StateVar.of(value) for name, value in values.items()})

    @classmethod
    def builder(cls) -> StateBuilder:
        """Return a fluent :class:`StateBuilder`."""
        return StateBuilder()

    def set(self, name: str, value: StateValue) -> None:
        """Insert or overwrite the variable ``name``."""
        self.variables[name] = StateVar.of(value)

    def get(self, name: str, as_type: type[_T]) -> _T | None:
        """Read ``name`` as ``as_type`` (``bool``, ``int``, ``float`` or ``str``).

        Returns ``None`` when the variable is missing or holds another kind.
        """
        reader = _READERS.get(as_type)
        if reader is None:
            msg = f"Unsupported state value type: {as_type.__name__}"
            raise TypeError(msg)
        variable = self.variables.get(name)
        if variable is None:
            return None
        return cast("_T | None", reader(variable))

    def get_var(self, name: str) -> StateVar | None:
        """Return the raw variable stored under ``name``."""
        return self.variables.get(name)

    def names(self) -> list[str]:
        """Return the variable names in sorted order."""
        return sorted(self.variables)

    def items(self) -> list[tuple[str, StateVar]]:
        """Return ``(name, variable)`` pairs sorted by name."""
        return sorted(self.variables.items(), key=itemgetter(0))

    def satisfies(self, conditions: WorldState) -> bool:
        """Return ``True`` when every variable in ``conditions`` is met by this state.

        Booleans and text need equal values, integers and decimals need a value at
        least as large as the required one. Missing variables and kind mismatches
        are simply unsatisfied.
        """
        for name, required in conditions.variables.items():
            current = self.variables.get(name)
            if current is None or not current.meets(required):
                return False
        return True

    def apply(self, effects: Mapping[str, EffectOp]) -> None:
        """Apply ``effects`` in place.

        ``add``/``subtract`` on a missing or non-numeric variable are dropped.
        """
        for name, effect in effects.items():
            if effect.kind is EffectKind.set:
                self.variables[name] = cast("StateVar", effect.value)
                continue
            current = self.variables.get(name)
            if current is None or not current.is_numeric:
                continue
            delta = effect.amount if effect.kind is EffectKind.add else -effect.amount
            self.variables[name] = current.shifted(delta)

    def merge(self, other: WorldState) -> None:
        """Copy every variable of ``other`` into this state, overwriting on conflict."""
        self.variables.update(other.variables)

    def clone(self) -> WorldState:
        """Return an independent copy of this state."""
        return self.model_copy(update={"variables": dict(self.variables)})

    def __contains__(self, name: object) -> bool:
        return name in self.variables

    def __len__(self) -> int:
        return len(self.variables)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, WorldState):
            return NotImplemented
        return self.variables == other.variables

    def __hash__(self) -> int:
        return hash(tuple(self.items()))

    def __str__(self) -> str:
        if not self.variables:
            return "empty state"
        lines = ["State:"]
        lines.extend(f"  - {name}: {value}" for name, value in self.items())
        return "\n".join(lines)


_READERS: dict[type, Callable[[StateVar], Any]] = {
    bool: StateVar.as_bool,
    int: StateVar.as_int,
    float: StateVar.as_float,
    str: StateVar.as_text,
}


class StateBuilder:
    """Fluent helper assembling a :class:`WorldState`."""

    def __init__(self) -> None:
        """Start with an empty set of variables."""
        self._variables: dict[str, StateVar] = {}

    def set(self, name: str, value: StateValue) -> StateBuilder:
        """Set ``name`` from any supported Python value."""
        self._variables[name] = StateVar.of(value)
        return self

    def flag(self, name: str, value: bool) -> StateBuilder:
        """Set a boolean variable."""
        self._variables[name] = StateVar.boolean(value)
        return self

    def integer(self, name: str, value: int) -> StateBuilder:
        """Set an integer variable."""
        self._variables[name] = StateVar.integer(value)
        return self

    def decimal(self, name: str, value: float) -> StateBuilder:
        """Set a decimal variable."""
        self._variables[name] = StateVar.decimal(value)
        return self

    def text(self, name: str, value: str) -> StateBuilder:
        """Set a text variable."""
        self._variables[name] = StateVar.text(value)
        return self

    def enum(self, name: str, member: Enum) -> StateBuilder:
        """Set a text variable from an enum member."""
        self._variables[name] = enum_to_state_var(member)
        return self

    def build(self) -> WorldState:
        """Return the assembled state."""
        return WorldState(variables=dict(self._variables))


__all__ = [
    "DECIMAL_SCALE",
    "EffectKind",
    "EffectOp",
    "StateBuilder",
    "StateValue",
    "StateVar",
    "VarKind",
    "WorldState",
    "enum_to_state_var",
    "from_float",
    "to_float",
]
