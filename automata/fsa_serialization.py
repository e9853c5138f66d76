import json
from typing import Dict

from .fsa_model import Automaton, AutomatonFormatError, State, Transition


def _list_or_empty(data: Dict, key: str) -> list:
    value = data.get(key)
    if value is None:
        return []
    if not isinstance(value, list):
        raise AutomatonFormatError(f'{key} must be a list')
    return value


def automaton_from_dict(data: Dict) -> Automaton:
    """
    Builds an Automaton from the editor's saved JSON document.

    Args:
        data: A dictionary with the following keys:
            - states: List of {id, isStartState, isFinalState, x, y, hasLoopOnAllInputs}
            - alphabet: List of symbols, turned into a set
            - transitions: List of {from, to, symbol}

    Returns:
        The in-memory Automaton. Presentation keys other than x, y and
        hasLoopOnAllInputs are dropped.

    Raises:
        AutomatonFormatError: If the document does not describe an automaton
    """
    if not isinstance(data, dict):
        raise AutomatonFormatError('Automaton must be a JSON object')

    raw_states = _list_or_empty(data, 'states')
    raw_alphabet = _list_or_empty(data, 'alphabet')
    raw_transitions = _list_or_empty(data, 'transitions')

    states = []
    seen_ids = set()
    for position, raw_state in enumerate(raw_states):
        if not isinstance(raw_state, dict) or not isinstance(raw_state.get('id'), str):
            raise AutomatonFormatError(f'State at position {position} has no string id')

        state_id = raw_state['id']
        if state_id in seen_ids:
            raise AutomatonFormatError(f"Duplicate state id '{state_id}'")
        seen_ids.add(state_id)

        for coordinate in ('x', 'y'):
            value = raw_state.get(coordinate, 0.0)
            if isinstance(value, bool) or not isinstance(value, (int, float)):
                raise AutomatonFormatError(f"State '{state_id}' has a non-numeric '{coordinate}'")

        states.append(State(
            id=state_id,
            is_start=bool(raw_state.get('isStartState', False)),
            is_final=bool(raw_state.get('isFinalState', False)),
            x=raw_state.get('x', 0.0),
            y=raw_state.get('y', 0.0),
            has_loop_on_all_inputs=bool(raw_state.get('hasLoopOnAllInputs', False))
        ))

    for symbol in raw_alphabet:
        if not isinstance(symbol, str):
            raise AutomatonFormatError('alphabet symbols must be strings')

    transitions = []
    for position, raw_transition in enumerate(raw_transitions):
        if not isinstance(raw_transition, dict):
            raise AutomatonFormatError(f'Transition at position {position} must be an object')

        for key in ('from', 'to', 'symbol'):
            if not isinstance(raw_transition.get(key), str):
                raise AutomatonFormatError(f"Transition at position {position} is missing '{key}'")

        transitions.append(Transition(raw_transition['from'], raw_transition['to'], raw_transition['symbol']))

    return Automaton(states=states, alphabet=raw_alphabet, transitions=transitions)


def automaton_to_dict(automaton: Automaton) -> Dict:
    """
    Converts an Automaton back to the saved JSON document shape.
    The alphabet is written as a sorted list.
    """
    return {
        'states': [
            {
                'id': state.id,
                'isStartState': state.is_start,
                'isFinalState': state.is_final,
                'x': state.x,
                'y': state.y,
                'hasLoopOnAllInputs': state.has_loop_on_all_inputs
            }
            for state in automaton.states
        ],
        'alphabet': sorted(automaton.alphabet),
        'transitions': [
            {'from': t.source, 'to': t.target, 'symbol': t.symbol}
            for t in automaton.transitions
        ]
    }


def loads(text: str) -> Automaton:
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise AutomatonFormatError(f'Invalid JSON: {e.msg}') from e
    return automaton_from_dict(data)


def dumps(automaton: Automaton, indent: int = 2) -> str:
    return json.dumps(automaton_to_dict(automaton), indent=indent, ensure_ascii=False)


def validate_automaton_data(data) -> Dict:
    """
    Validates that request data has the structure of a saved automaton.

    Args:
        data: The decoded JSON value to validate

    Returns:
        Dict: Validation result with 'valid' boolean and optional 'error' message
    """
    try:
        automaton_from_dict(data)
    except AutomatonFormatError as e:
        return {'valid': False, 'error': str(e)}

    return {'valid': True}
