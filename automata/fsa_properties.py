import logging
from collections import deque
from typing import Dict

from .fsa_model import Automaton, AutomatonKind

logger = logging.getLogger(__name__)


def is_nondeterministic(automaton: Automaton) -> bool:
    """
    Checks if the automaton must be evaluated as an NFA.

    An automaton is non-deterministic if:
    1. It has at least one epsilon transition
    2. Some state has two or more transitions on the same symbol, whatever
       their destinations (a duplicated transition counts too)

    Args:
        automaton: The automaton to classify

    Returns:
        True if non-deterministic, False if deterministic
    """
    index = automaton.index

    if index.has_epsilon:
        return True

    return index.has_duplicate_symbols


def is_deterministic(automaton: Automaton) -> bool:
    return not is_nondeterministic(automaton)


def classify(automaton: Automaton) -> Dict:
    """
    Classifies the automaton as DFA or NFA.

    Returns:
        Dict: {
            'is_nondeterministic': bool,
            'type': 'NFA' or 'DFA',
            'description': str
        }
    """
    kind = automaton.kind
    logger.debug("Classified automaton with %d states as %s", len(automaton.states), kind.label)

    return {
        'is_nondeterministic': kind is AutomatonKind.NONDETERMINISTIC,
        'type': kind.label,
        'description': kind.description
    }


def is_complete(automaton: Automaton) -> bool:
    """
    Checks if the automaton is complete.

    An automaton is complete if for each state and each alphabet symbol there is
    at least one transition. Epsilon transitions are ignored for this check.
    """
    # Trivially complete with no states or no alphabet
    if not automaton.states or not automaton.alphabet:
        return True

    index = automaton.index
    for state_id in automaton.state_ids:
        for symbol in automaton.alphabet:
            if not index.targets(state_id, symbol):
                return False

    return True


def is_connected(automaton: Automaton) -> bool:
    """
    Checks if the automaton is connected.

    An automaton is connected if all states are reachable from the start state,
    following any transition including epsilon transitions.
    """
    if not automaton.states:
        return True

    start = automaton.start_state
    if start is None:
        return len(automaton.states) <= 1

    index = automaton.index
    reachable = {start.id}
    queue = deque([start.id])

    while queue:
        current = queue.popleft()
        for _, next_state in index.successors(current):
            if next_state not in reachable:
                reachable.add(next_state)
                queue.append(next_state)

    # Dangling transition targets may be reachable without being states
    return set(automaton.state_ids) <= reachable


def check_all_properties(automaton: Automaton) -> Dict:
    """
    Check all structural properties at once.

    Returns:
        Dict: {
            'deterministic': bool,
            'complete': bool,
            'connected': bool
        }
    """
    return {
        'deterministic': is_deterministic(automaton),
        'complete': is_complete(automaton),
        'connected': is_connected(automaton)
    }
