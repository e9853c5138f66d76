import json
import logging

from django.http import JsonResponse
from django.views.decorators.csrf import csrf_exempt
from django.views.decorators.http import require_POST

from .conf import get_setting
from .fsa_equivalence import check_equivalence as check_automata_equivalence
from .fsa_model import AutomatonKind
from .fsa_properties import check_all_properties, classify
from .fsa_serialization import automaton_from_dict, validate_automaton_data
from .fsa_simulation import evaluate as evaluate_membership
from .fsa_simulation import simulate_deterministic_fsa, simulate_nondeterministic_fsa

logger = logging.getLogger(__name__)


def _parse_body(request):
    data = json.loads(request.body)
    if not isinstance(data, dict):
        raise ValueError('Request body must be a JSON object')
    return data


def _load_automaton(data, key='automaton'):
    """
    Pulls an automaton out of decoded request data.

    Returns:
        (automaton, None) on success, or (None, JsonResponse) describing the problem
    """
    raw = data.get(key)
    if not raw:
        return None, JsonResponse({'error': 'Missing automaton definition'}, status=400)

    validation = validate_automaton_data(raw)
    if not validation['valid']:
        return None, JsonResponse({'error': validation['error']}, status=400)

    return automaton_from_dict(raw), None


def _load_input(data):
    input_string = data.get('input', '')
    if not isinstance(input_string, str):
        raise ValueError('input must be a string')

    max_length = get_setting('MAX_INPUT_LENGTH')
    if len(input_string) > max_length:
        raise ValueError(f'input exceeds the maximum length of {max_length} symbols')

    return input_string


def _membership_response(result, input_string):
    payload = result.to_dict()
    payload['message'] = result.message(input_string)
    return JsonResponse(payload)


@csrf_exempt
@require_POST
def evaluate(request):
    """
    Django view to handle membership test requests.
    Automatically detects if the automaton is deterministic or non-deterministic.

    Expects a POST request with a JSON body containing:
    - automaton: The automaton in the saved JSON format
    - input: The input string to test

    Returns a JSON response with the membership result.
    """
    try:
        data = _parse_body(request)

        automaton, error_response = _load_automaton(data)
        if error_response:
            return error_response

        input_string = _load_input(data)

        result = evaluate_membership(automaton, input_string)
        return _membership_response(result, input_string)

    except ValueError as e:
        return JsonResponse({'error': str(e)}, status=400)
    except Exception as e:
        logger.exception("Membership test failed")
        return JsonResponse({'error': f'Server error: {str(e)}'}, status=500)


@csrf_exempt
@require_POST
def simulate_dfa(request):
    """
    Django view to run the deterministic evaluator specifically.
    Rejects automata classified as non-deterministic with a 400.
    """
    try:
        data = _parse_body(request)

        automaton, error_response = _load_automaton(data)
        if error_response:
            return error_response

        input_string = _load_input(data)

        if automaton.kind is AutomatonKind.NONDETERMINISTIC:
            return JsonResponse({'error': 'Automaton must be deterministic'}, status=400)

        result = simulate_deterministic_fsa(automaton, input_string)
        return _membership_response(result, input_string)

    except ValueError as e:
        return JsonResponse({'error': str(e)}, status=400)
    except Exception as e:
        logger.exception("DFA simulation failed")
        return JsonResponse({'error': f'Server error: {str(e)}'}, status=500)


@csrf_exempt
@require_POST
def simulate_nfa(request):
    """
    Django view to run the non-deterministic evaluator, whatever the automaton's type.
    """
    try:
        data = _parse_body(request)

        automaton, error_response = _load_automaton(data)
        if error_response:
            return error_response

        input_string = _load_input(data)

        result = simulate_nondeterministic_fsa(automaton, input_string)
        return _membership_response(result, input_string)

    except ValueError as e:
        return JsonResponse({'error': str(e)}, status=400)
    except Exception as e:
        logger.exception("NFA simulation failed")
        return JsonResponse({'error': f'Server error: {str(e)}'}, status=500)


@csrf_exempt
@require_POST
def classify_automaton(request):
    """
    Django view to check if an automaton is deterministic or non-deterministic.
    """
    try:
        data = _parse_body(request)

        automaton, error_response = _load_automaton(data)
        if error_response:
            return error_response

        return JsonResponse(classify(automaton))

    except ValueError as e:
        return JsonResponse({'error': str(e)}, status=400)
    except Exception as e:
        logger.exception("Classification failed")
        return JsonResponse({'error': f'Server error: {str(e)}'}, status=500)


@csrf_exempt
@require_POST
def check_properties(request):
    """
    Django view to check the structural properties of an automaton.

    Returns a JSON response with:
    - deterministic: bool
    - complete: bool
    - connected: bool
    """
    try:
        data = _parse_body(request)

        automaton, error_response = _load_automaton(data)
        if error_response:
            return error_response

        return JsonResponse(check_all_properties(automaton))

    except ValueError as e:
        return JsonResponse({'error': str(e)}, status=400)
    except Exception as e:
        logger.exception("Property check failed")
        return JsonResponse({'error': f'Server error: {str(e)}'}, status=500)


@csrf_exempt
@require_POST
def check_equivalence(request):
    """
    Django view to check whether two deterministic automata accept the same language.

    Expects a POST request with a JSON body containing:
    - automatonA: The first automaton
    - automatonB: The second automaton
    - exhaustive: Optional, explore the whole product instead of stopping early

    Returns a JSON response with either 'equivalent' or an 'error' kind
    (MissingStartState, NondeterministicInputUnsupported) and 'which'.
    """
    try:
        data = _parse_body(request)

        automaton_a, error_response = _load_automaton(data, 'automatonA')
        if error_response:
            return error_response

        automaton_b, error_response = _load_automaton(data, 'automatonB')
        if error_response:
            return error_response

        exhaustive = data.get('exhaustive', get_setting('EXHAUSTIVE_EQUIVALENCE'))
        if not isinstance(exhaustive, bool):
            raise ValueError('exhaustive must be a boolean')

        result = check_automata_equivalence(automaton_a, automaton_b, exhaustive=exhaustive)
        return JsonResponse(result.to_dict())

    except ValueError as e:
        return JsonResponse({'error': str(e)}, status=400)
    except Exception as e:
        logger.exception("Equivalence check failed")
        return JsonResponse({'error': f'Server error: {str(e)}'}, status=500)
