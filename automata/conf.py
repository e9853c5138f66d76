from django.conf import settings

DEFAULTS = {
    'MAX_INPUT_LENGTH': 10000,
    'EXHAUSTIVE_EQUIVALENCE': False,
}


def get_setting(name: str):
    """Reads a key of the AUTOMATA settings dict, falling back to DEFAULTS."""
    overrides = getattr(settings, 'AUTOMATA', {})
    return overrides.get(name, DEFAULTS[name])
