import logging
from collections import deque
from dataclasses import dataclass, field
from typing import Dict, Hashable, Iterable, List, Optional, Sequence, Set, Tuple, Union

from .fsa_model import Automaton, AutomatonKind, KernelError

logger = logging.getLogger(__name__)


class _DeadState:
    """Non-accepting absorbing sink standing in for a missing transition."""

    __slots__ = ('owner',)

    def __init__(self, owner: str):
        self.owner = owner

    def __repr__(self):
        return f'<dead {self.owner}>'


ProductState = Tuple[Union[str, _DeadState], Union[str, _DeadState]]


@dataclass
class ProductAutomaton:
    """
    The reachable part of the synchronized product of two DFAs.

    States are pairs (p, q); a pair whose members differ in acceptance is a
    disagreement state.
    """

    start: ProductState
    states: List[ProductState] = field(default_factory=list)
    transitions: List[Tuple[ProductState, ProductState, str]] = field(default_factory=list)
    disagreement_states: Set[ProductState] = field(default_factory=set)
    parents: Dict[ProductState, Tuple[ProductState, str]] = field(default_factory=dict)
    visited_count: int = 0

    def path_to(self, pair: ProductState) -> str:
        """Shortest input reaching the given pair, rebuilt from BFS parents."""
        symbols = []
        while pair in self.parents:
            pair, symbol = self.parents[pair]
            symbols.append(symbol)
        return ''.join(reversed(symbols))


@dataclass(frozen=True)
class EquivalenceResult:
    equivalent: bool
    error: Optional[KernelError] = None
    which: Optional[str] = None
    counterexample: Optional[str] = None
    product_states: int = 0
    disagreement_states: Tuple[ProductState, ...] = ()

    @property
    def ok(self) -> bool:
        return self.error is None

    def to_dict(self) -> Dict:
        if self.error is not None:
            return {'error': self.error.value, 'which': self.which}

        return {
            'equivalent': self.equivalent,
            'counterexample': self.counterexample,
            'product_states': self.product_states,
            'disagreement_states': [[_state_label(p), _state_label(q)] for p, q in self.disagreement_states]
        }


def _state_label(state) -> Optional[str]:
    return None if isinstance(state, _DeadState) else state


def _which(first: bool, second: bool) -> str:
    if first and second:
        return 'both'
    return 'first' if first else 'second'


def is_target_reachable(start: Hashable, edges: Iterable[Sequence], targets: Set) -> bool:
    """
    Breadth-first search over a directed graph.

    Args:
        start: The node to search from
        edges: (source, target) pairs; any further items (such as a label) are ignored
        targets: Nodes to look for

    Returns:
        True if some node of ``targets`` is reachable from ``start``, start included
    """
    adjacency: Dict[Hashable, List[Hashable]] = {}
    for edge in edges:
        adjacency.setdefault(edge[0], []).append(edge[1])

    visited = {start}
    queue = deque([start])

    while queue:
        current = queue.popleft()

        if current in targets:
            return True

        for next_node in adjacency.get(current, []):
            if next_node not in visited:
                visited.add(next_node)
                queue.append(next_node)

    return False


def _traverse_product(automaton1: Automaton, automaton2: Automaton, stop_at_first: bool) -> ProductAutomaton:
    """
    Breadth-first walk of the product of two DFAs made total with dead sinks.

    Both automata must have a start state. With ``stop_at_first`` the walk ends as
    soon as one disagreement state is visited.
    """
    dead1 = _DeadState('first')
    dead2 = _DeadState('second')
    index1 = automaton1.index
    index2 = automaton2.index
    finals1 = automaton1.final_state_ids
    finals2 = automaton2.final_state_ids

    # Sorted so traversal order, and therefore counterexamples, are reproducible
    combined_alphabet = sorted(automaton1.alphabet | automaton2.alphabet)

    def next_or_dead1(state, symbol):
        if state is dead1:
            return dead1
        target = index1.first_target(state, symbol)
        return dead1 if target is None else target

    def next_or_dead2(state, symbol):
        if state is dead2:
            return dead2
        target = index2.first_target(state, symbol)
        return dead2 if target is None else target

    start_pair = (automaton1.start_state.id, automaton2.start_state.id)
    product = ProductAutomaton(start=start_pair, states=[start_pair])
    visited = {start_pair}
    queue = deque([start_pair])

    while queue:
        pair = queue.popleft()
        product.visited_count += 1
        p, q = pair

        if (p in finals1) != (q in finals2):
            product.disagreement_states.add(pair)
            if stop_at_first:
                break

        for symbol in combined_alphabet:
            next_pair = (next_or_dead1(p, symbol), next_or_dead2(q, symbol))
            product.transitions.append((pair, next_pair, symbol))

            if next_pair not in visited:
                visited.add(next_pair)
                product.states.append(next_pair)
                product.parents[next_pair] = (pair, symbol)
                queue.append(next_pair)

    return product


def build_product(automaton1: Automaton, automaton2: Automaton) -> ProductAutomaton:
    """
    Build the full reachable product of two DFAs, continuing past disagreement states.

    Args:
        automaton1: First DFA, with a start state
        automaton2: Second DFA, with a start state

    Returns:
        The reachable product automaton
    """
    return _traverse_product(automaton1, automaton2, stop_at_first=False)


def check_equivalence(automaton1: Automaton, automaton2: Automaton, exhaustive: bool = False) -> EquivalenceResult:
    """
    Check if two DFAs accept the same language.

    Missing transitions are sent to a per-automaton dead state so both automata are
    total over the union of their alphabets. The automata are equivalent iff no
    disagreement state is reachable from the pair of start states.

    Args:
        automaton1: First DFA
        automaton2: Second DFA
        exhaustive: Build the whole reachable product and then test reachability of
            the disagreement states, instead of stopping at the first one found

    Returns:
        An EquivalenceResult. ``error`` is MISSING_START_STATE or
        NONDETERMINISTIC_INPUT_UNSUPPORTED, with ``which`` naming the offending
        automaton ('first', 'second' or 'both'), when the check does not apply.
    """
    missing1 = automaton1.start_state is None
    missing2 = automaton2.start_state is None
    if missing1 or missing2:
        which = _which(missing1, missing2)
        logger.warning("Equivalence requested but the %s automaton has no start state", which)
        return EquivalenceResult(equivalent=False, error=KernelError.MISSING_START_STATE, which=which)

    nfa1 = automaton1.kind is AutomatonKind.NONDETERMINISTIC
    nfa2 = automaton2.kind is AutomatonKind.NONDETERMINISTIC
    if nfa1 or nfa2:
        return EquivalenceResult(
            equivalent=False,
            error=KernelError.NONDETERMINISTIC_INPUT_UNSUPPORTED,
            which=_which(nfa1, nfa2)
        )

    product = _traverse_product(automaton1, automaton2, stop_at_first=not exhaustive)

    if exhaustive:
        equivalent = not is_target_reachable(product.start, product.transitions, product.disagreement_states)
    else:
        equivalent = not product.disagreement_states

    # States are listed in BFS order, so the first disagreement has the shortest path
    disagreements = [pair for pair in product.states if pair in product.disagreement_states]

    counterexample = None
    # Input strings are read one character at a time, so a path over longer
    # symbols could not be replayed as a string
    single_character_symbols = all(len(symbol) == 1 for symbol in automaton1.alphabet | automaton2.alphabet)
    if not equivalent and single_character_symbols:
        counterexample = product.path_to(disagreements[0])

    logger.debug(
        "Equivalence check visited %d product states: %s",
        product.visited_count, 'equivalent' if equivalent else 'not equivalent'
    )

    return EquivalenceResult(
        equivalent=equivalent,
        counterexample=counterexample,
        product_states=product.visited_count,
        disagreement_states=tuple(disagreements)
    )
