import logging
from dataclasses import dataclass, field
from typing import Dict, FrozenSet, Iterable, List, Optional, Tuple, Union

from .fsa_model import Automaton, AutomatonKind, KernelError, TransitionIndex

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MembershipResult:
    """
    Outcome of a membership test.

    A result either carries a decision (``error is None``) or a failure kind that
    prevented evaluation. The trace records the walk for display: deterministic
    runs store ``(state, symbol, next_state)`` steps, non-deterministic runs store
    the sorted state set held before each symbol and after the last one.
    """

    accepted: bool
    automaton_type: str
    error: Optional[KernelError] = None
    rejection_reason: Optional[str] = None
    rejection_position: Optional[int] = None
    trace: Tuple = field(default_factory=tuple)

    @property
    def ok(self) -> bool:
        return self.error is None

    def to_dict(self) -> Dict:
        if self.error is not None:
            return {
                'error': self.error.value,
                'type': self.automaton_type,
                'rejection_reason': self.rejection_reason
            }

        data = {
            'accepted': self.accepted,
            'type': self.automaton_type,
            'trace': [list(step) for step in self.trace]
        }
        if not self.accepted:
            data['rejection_reason'] = self.rejection_reason
            data['rejection_position'] = self.rejection_position
        return data

    def message(self, input_string: str) -> str:
        if self.error is KernelError.NO_START_STATE:
            return "Error: No start state defined. Please mark a state as the start state."
        verdict = 'ACCEPTED' if self.accepted else 'REJECTED'
        return f'[{self.automaton_type}] String "{input_string}" is {verdict}.'


def _no_start_state(automaton_type: str) -> MembershipResult:
    logger.warning("%s has no start state", automaton_type)
    return MembershipResult(
        accepted=False,
        automaton_type=automaton_type,
        error=KernelError.NO_START_STATE,
        rejection_reason='No start state defined'
    )


def epsilon_closure(source: Union[Automaton, TransitionIndex], states: Iterable[str]) -> FrozenSet[str]:
    """
    Compute epsilon closure of a set of states.

    Args:
        source: The automaton, or a transition index built from its transitions
        states: Set of states to compute closure for

    Returns:
        The input states plus every state reachable from them via epsilon transitions
    """
    index = source.index if isinstance(source, Automaton) else source

    closure = set(states)
    stack = list(closure)

    while stack:
        current = stack.pop()

        for next_state in index.epsilon_targets(current):
            if next_state not in closure:
                closure.add(next_state)
                stack.append(next_state)

    return frozenset(closure)


def simulate_deterministic_fsa(automaton: Automaton, input_string: str) -> MembershipResult:
    """
    Simulates a deterministic automaton with the given input string.

    The automaton is treated as a partial function: a symbol outside the alphabet
    or a missing transition rejects immediately, there is no implicit self-loop.

    Args:
        automaton: An automaton already classified as deterministic
        input_string: The input string to simulate

    Returns:
        A MembershipResult; ``error`` is NO_START_STATE when no state is marked as start
    """
    automaton_type = AutomatonKind.DETERMINISTIC.label

    start = automaton.start_state
    if start is None:
        return _no_start_state(automaton_type)

    index = automaton.index
    current_state = start.id
    execution_path: List[Tuple[str, str, str]] = []

    for position, symbol in enumerate(input_string):
        # Also rejects the epsilon marker, which is never part of the alphabet
        if symbol not in automaton.alphabet:
            return MembershipResult(
                accepted=False,
                automaton_type=automaton_type,
                rejection_reason=f"Symbol '{symbol}' not in alphabet",
                rejection_position=position,
                trace=tuple(execution_path)
            )

        next_state = index.first_target(current_state, symbol)
        if next_state is None:
            return MembershipResult(
                accepted=False,
                automaton_type=automaton_type,
                rejection_reason=f"No transition defined for symbol '{symbol}' from state '{current_state}'",
                rejection_position=position,
                trace=tuple(execution_path)
            )

        execution_path.append((current_state, symbol, next_state))
        current_state = next_state

    if current_state in automaton.final_state_ids:
        return MembershipResult(accepted=True, automaton_type=automaton_type, trace=tuple(execution_path))

    return MembershipResult(
        accepted=False,
        automaton_type=automaton_type,
        rejection_reason=f"Final state '{current_state}' is not an accepting state",
        rejection_position=len(input_string),
        trace=tuple(execution_path)
    )


def simulate_nondeterministic_fsa(automaton: Automaton, input_string: str) -> MembershipResult:
    """
    Simulates a non-deterministic automaton by tracking the set of current states.

    The current set starts as the epsilon closure of the start state. For every
    symbol it is replaced by the epsilon closure of all targets reachable on that
    symbol. No subset construction is built, so each step costs at most
    O(states x out-degree).

    Args:
        automaton: Any automaton, deterministic or not
        input_string: The input string to simulate

    Returns:
        A MembershipResult; ``error`` is NO_START_STATE when no state is marked as start
    """
    automaton_type = AutomatonKind.NONDETERMINISTIC.label

    start = automaton.start_state
    if start is None:
        return _no_start_state(automaton_type)

    index = automaton.index
    current_states = epsilon_closure(index, {start.id})
    trace: List[Tuple[str, ...]] = [tuple(sorted(current_states))]

    for position, symbol in enumerate(input_string):
        if symbol not in automaton.alphabet:
            return MembershipResult(
                accepted=False,
                automaton_type=automaton_type,
                rejection_reason=f"Symbol '{symbol}' not in alphabet",
                rejection_position=position,
                trace=tuple(trace)
            )

        next_states = set()
        for state in current_states:
            next_states.update(index.targets(state, symbol))

        current_states = epsilon_closure(index, next_states)
        trace.append(tuple(sorted(current_states)))

        # No continuation can be accepted from an empty set
        if not current_states:
            return MembershipResult(
                accepted=False,
                automaton_type=automaton_type,
                rejection_reason=f"No state reachable after symbol '{symbol}'",
                rejection_position=position,
                trace=tuple(trace)
            )

    if current_states & automaton.final_state_ids:
        return MembershipResult(accepted=True, automaton_type=automaton_type, trace=tuple(trace))

    return MembershipResult(
        accepted=False,
        automaton_type=automaton_type,
        rejection_reason='No accepting state in the final state set',
        rejection_position=len(input_string),
        trace=tuple(trace)
    )


def evaluate(automaton: Automaton, input_string: str) -> MembershipResult:
    """
    Tests membership, picking the evaluator from the automaton's classification.
    """
    if automaton.kind is AutomatonKind.NONDETERMINISTIC:
        return simulate_nondeterministic_fsa(automaton, input_string)
    return simulate_deterministic_fsa(automaton, input_string)
