from collections import defaultdict
from dataclasses import dataclass, field
from enum import Enum
from functools import cached_property
from typing import Dict, FrozenSet, Iterable, List, Optional, Tuple

EPSILON = 'ε'


class AutomatonKind(Enum):
    DETERMINISTIC = 'DFA'
    NONDETERMINISTIC = 'NFA'

    @property
    def label(self) -> str:
        return self.value

    @property
    def description(self) -> str:
        if self is AutomatonKind.NONDETERMINISTIC:
            return 'Non-deterministic Finite Automaton'
        return 'Deterministic Finite Automaton'


class KernelError(Enum):
    """Failure kinds handed back to callers as values, never raised."""

    NO_START_STATE = 'NoStartState'
    MISSING_START_STATE = 'MissingStartState'
    NONDETERMINISTIC_INPUT_UNSUPPORTED = 'NondeterministicInputUnsupported'


class AutomatonFormatError(ValueError):
    """Raised when persisted automaton data cannot be turned into an Automaton."""


@dataclass(frozen=True)
class State:
    id: str
    is_start: bool = False
    is_final: bool = False
    # Editor-only fields, never read by the evaluators
    x: float = 0.0
    y: float = 0.0
    has_loop_on_all_inputs: bool = False


@dataclass(frozen=True)
class Transition:
    source: str
    target: str
    symbol: str

    @property
    def is_epsilon(self) -> bool:
        return self.symbol == EPSILON


class TransitionIndex:
    """
    Lookup table over a transition collection, keyed by (state, symbol).

    Targets are kept in transition insertion order, duplicates included, so the
    first target of a key is the one a linear scan of the transitions would find.
    """

    def __init__(self, transitions: Iterable[Transition]):
        self._targets: Dict[Tuple[str, str], List[str]] = defaultdict(list)
        self._outgoing: Dict[str, List[Tuple[str, str]]] = defaultdict(list)

        for transition in transitions:
            self._targets[(transition.source, transition.symbol)].append(transition.target)
            self._outgoing[transition.source].append((transition.symbol, transition.target))

    def targets(self, state_id: str, symbol: str) -> Tuple[str, ...]:
        return tuple(self._targets.get((state_id, symbol), ()))

    def first_target(self, state_id: str, symbol: str) -> Optional[str]:
        targets = self._targets.get((state_id, symbol))
        if not targets:
            return None
        return targets[0]

    def epsilon_targets(self, state_id: str) -> Tuple[str, ...]:
        return self.targets(state_id, EPSILON)

    def successors(self, state_id: str) -> Tuple[Tuple[str, str], ...]:
        """All (symbol, target) pairs leaving the given state."""
        return tuple(self._outgoing.get(state_id, ()))

    @property
    def has_epsilon(self) -> bool:
        return any(symbol == EPSILON for (_, symbol) in self._targets)

    @property
    def has_duplicate_symbols(self) -> bool:
        return any(len(targets) > 1 for targets in self._targets.values())


@dataclass(frozen=True)
class Automaton:
    """
    An immutable finite automaton as produced by the editor.

    Args:
        states: States in insertion order
        alphabet: Input symbols; the epsilon marker is dropped if present
        transitions: Transitions in insertion order
    """

    states: Tuple[State, ...] = ()
    alphabet: FrozenSet[str] = field(default_factory=frozenset)
    transitions: Tuple[Transition, ...] = ()

    def __post_init__(self):
        object.__setattr__(self, 'states', tuple(self.states))
        object.__setattr__(self, 'alphabet', frozenset(self.alphabet) - {EPSILON})
        object.__setattr__(self, 'transitions', tuple(self.transitions))

    @property
    def start_state(self) -> Optional[State]:
        # With several start flags the first one in insertion order wins
        for state in self.states:
            if state.is_start:
                return state
        return None

    @property
    def state_ids(self) -> Tuple[str, ...]:
        return tuple(state.id for state in self.states)

    @property
    def final_state_ids(self) -> FrozenSet[str]:
        return frozenset(state.id for state in self.states if state.is_final)

    def get_state(self, state_id: str) -> Optional[State]:
        for state in self.states:
            if state.id == state_id:
                return state
        return None

    @cached_property
    def index(self) -> TransitionIndex:
        return TransitionIndex(self.transitions)

    @cached_property
    def kind(self) -> AutomatonKind:
        # Imported here, fsa_properties depends on this module
        from .fsa_properties import is_nondeterministic

        if is_nondeterministic(self):
            return AutomatonKind.NONDETERMINISTIC
        return AutomatonKind.DETERMINISTIC
