import json

from django.test import Client, TestCase, override_settings

from automata.tests.factories import even_ones_payload


class AutomataViewTestCase(TestCase):
    """Base test case with common automaton definitions and utilities"""

    def setUp(self):
        self.client = Client()

        # Even number of 1s
        self.sample_dfa = even_ones_payload()

        # Strings ending with 'ab'
        self.sample_nfa = {
            'states': [
                {'id': 'S0', 'isStartState': True, 'isFinalState': False, 'x': 100, 'y': 100},
                {'id': 'S1', 'isStartState': False, 'isFinalState': False, 'x': 200, 'y': 100},
                {'id': 'S2', 'isStartState': False, 'isFinalState': True, 'x': 300, 'y': 100},
            ],
            'alphabet': ['a', 'b'],
            'transitions': [
                {'from': 'S0', 'to': 'S0', 'symbol': 'a'},
                {'from': 'S0', 'to': 'S1', 'symbol': 'a'},
                {'from': 'S0', 'to': 'S0', 'symbol': 'b'},
                {'from': 'S1', 'to': 'S2', 'symbol': 'b'},
            ]
        }

        # Accepts every string over {0, 1}
        self.sample_universal_dfa = {
            'states': [{'id': 'r0', 'isStartState': True, 'isFinalState': True, 'x': 0, 'y': 0}],
            'alphabet': ['0', '1'],
            'transitions': [
                {'from': 'r0', 'to': 'r0', 'symbol': '0'},
                {'from': 'r0', 'to': 'r0', 'symbol': '1'},
            ]
        }

        self.no_start_dfa = {
            'states': [{'id': 'q0', 'isStartState': False, 'isFinalState': True, 'x': 0, 'y': 0}],
            'alphabet': ['0'],
            'transitions': []
        }

    def post_json(self, url, data):
        """Helper method to send JSON POST requests"""
        return self.client.post(
            url,
            data=json.dumps(data),
            content_type='application/json'
        )


class EvaluateViewTests(AutomataViewTestCase):
    """Tests for the auto-detecting membership endpoint"""

    def test_dfa_accepted(self):
        response = self.post_json('/api/evaluate/', {'automaton': self.sample_dfa, 'input': '11'})

        self.assertEqual(response.status_code, 200)
        data = response.json()
        self.assertTrue(data['accepted'])
        self.assertEqual(data['type'], 'DFA')
        self.assertEqual(data['message'], '[DFA] String "11" is ACCEPTED.')
        self.assertEqual(len(data['trace']), 2)

    def test_dfa_rejected(self):
        response = self.post_json('/api/evaluate/', {'automaton': self.sample_dfa, 'input': '1'})

        self.assertEqual(response.status_code, 200)
        data = response.json()
        self.assertFalse(data['accepted'])
        self.assertEqual(data['rejection_position'], 1)
        self.assertEqual(data['message'], '[DFA] String "1" is REJECTED.')

    def test_nfa_accepted(self):
        response = self.post_json('/api/evaluate/', {'automaton': self.sample_nfa, 'input': 'aab'})

        self.assertEqual(response.status_code, 200)
        data = response.json()
        self.assertTrue(data['accepted'])
        self.assertEqual(data['type'], 'NFA')

    def test_empty_input_string(self):
        response = self.post_json('/api/evaluate/', {'automaton': self.sample_dfa, 'input': ''})

        self.assertEqual(response.status_code, 200)
        self.assertTrue(response.json()['accepted'])

    def test_missing_input_defaults_to_empty(self):
        response = self.post_json('/api/evaluate/', {'automaton': self.sample_nfa})

        self.assertEqual(response.status_code, 200)
        self.assertFalse(response.json()['accepted'])

    def test_no_start_state(self):
        response = self.post_json('/api/evaluate/', {'automaton': self.no_start_dfa, 'input': '0'})

        self.assertEqual(response.status_code, 200)
        data = response.json()
        self.assertEqual(data['error'], 'NoStartState')
        self.assertNotIn('accepted', data)

    def test_missing_automaton(self):
        response = self.post_json('/api/evaluate/', {'input': '1'})

        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()['error'], 'Missing automaton definition')

    def test_invalid_automaton_structure(self):
        response = self.post_json('/api/evaluate/', {'automaton': {'states': 'q0'}, 'input': '1'})

        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()['error'], 'states must be a list')

    def test_input_must_be_string(self):
        response = self.post_json('/api/evaluate/', {'automaton': self.sample_dfa, 'input': 11})

        self.assertEqual(response.status_code, 400)

    @override_settings(AUTOMATA={'MAX_INPUT_LENGTH': 3})
    def test_input_too_long(self):
        response = self.post_json('/api/evaluate/', {'automaton': self.sample_dfa, 'input': '0000'})

        self.assertEqual(response.status_code, 400)
        self.assertIn('maximum length', response.json()['error'])

    def test_get_request_not_allowed(self):
        response = self.client.get('/api/evaluate/')

        self.assertEqual(response.status_code, 405)

    def test_invalid_json(self):
        response = self.client.post('/api/evaluate/', data='{invalid json', content_type='application/json')

        self.assertEqual(response.status_code, 400)

    def test_body_must_be_object(self):
        response = self.post_json('/api/evaluate/', ['automaton'])

        self.assertEqual(response.status_code, 400)


class SpecificEvaluatorViewTests(AutomataViewTestCase):
    """Tests for the evaluator-specific endpoints"""

    def test_simulate_dfa(self):
        response = self.post_json('/api/simulate-dfa/', {'automaton': self.sample_dfa, 'input': '0110'})

        self.assertEqual(response.status_code, 200)
        self.assertTrue(response.json()['accepted'])

    def test_simulate_dfa_with_nfa(self):
        response = self.post_json('/api/simulate-dfa/', {'automaton': self.sample_nfa, 'input': 'ab'})

        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()['error'], 'Automaton must be deterministic')

    def test_simulate_nfa(self):
        response = self.post_json('/api/simulate-nfa/', {'automaton': self.sample_nfa, 'input': 'ab'})

        self.assertEqual(response.status_code, 200)
        data = response.json()
        self.assertTrue(data['accepted'])
        self.assertEqual(data['trace'], [['S0'], ['S0', 'S1'], ['S0', 'S2']])

    def test_simulate_nfa_with_dfa(self):
        response = self.post_json('/api/simulate-nfa/', {'automaton': self.sample_dfa, 'input': '11'})

        self.assertEqual(response.status_code, 200)
        data = response.json()
        self.assertTrue(data['accepted'])
        self.assertEqual(data['type'], 'NFA')

    def test_epsilon_transition(self):
        automaton = {
            'states': [
                {'id': 'q0', 'isStartState': True, 'isFinalState': False, 'x': 0, 'y': 0},
                {'id': 'q1', 'isStartState': False, 'isFinalState': True, 'x': 0, 'y': 0},
            ],
            'alphabet': [],
            'transitions': [{'from': 'q0', 'to': 'q1', 'symbol': 'ε'}]
        }

        response = self.post_json('/api/evaluate/', {'automaton': automaton, 'input': ''})

        self.assertEqual(response.status_code, 200)
        data = response.json()
        self.assertTrue(data['accepted'])
        self.assertEqual(data['type'], 'NFA')


class ClassificationViewTests(AutomataViewTestCase):
    def test_classify_dfa(self):
        response = self.post_json('/api/classify/', {'automaton': self.sample_dfa})

        self.assertEqual(response.status_code, 200)
        data = response.json()
        self.assertFalse(data['is_nondeterministic'])
        self.assertEqual(data['type'], 'DFA')

    def test_classify_nfa(self):
        response = self.post_json('/api/classify/', {'automaton': self.sample_nfa})

        self.assertEqual(response.status_code, 200)
        self.assertTrue(response.json()['is_nondeterministic'])

    def test_check_properties(self):
        response = self.post_json('/api/check-properties/', {'automaton': self.sample_nfa})

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json(), {'deterministic': False, 'complete': False, 'connected': True})

    def test_classify_missing_automaton(self):
        response = self.post_json('/api/classify/', {})

        self.assertEqual(response.status_code, 400)


class EquivalenceViewTests(AutomataViewTestCase):
    """Tests for the equivalence endpoint"""

    def test_equivalent(self):
        response = self.post_json('/api/check-equivalence/', {
            'automatonA': self.sample_universal_dfa,
            'automatonB': self.sample_universal_dfa
        })

        self.assertEqual(response.status_code, 200)
        data = response.json()
        self.assertTrue(data['equivalent'])
        self.assertIsNone(data['counterexample'])

    def test_not_equivalent(self):
        response = self.post_json('/api/check-equivalence/', {
            'automatonA': self.sample_dfa,
            'automatonB': self.sample_universal_dfa,
            'exhaustive': True
        })

        self.assertEqual(response.status_code, 200)
        data = response.json()
        self.assertFalse(data['equivalent'])
        self.assertEqual(data['counterexample'], '1')
        self.assertEqual(data['disagreement_states'], [['q1', 'r0']])

    def test_missing_start_state(self):
        response = self.post_json('/api/check-equivalence/', {
            'automatonA': self.sample_dfa,
            'automatonB': self.no_start_dfa
        })

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json(), {'error': 'MissingStartState', 'which': 'second'})

    def test_nondeterministic_input(self):
        response = self.post_json('/api/check-equivalence/', {
            'automatonA': self.sample_nfa,
            'automatonB': self.sample_dfa
        })

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json(), {'error': 'NondeterministicInputUnsupported', 'which': 'first'})

    def test_missing_second_automaton(self):
        response = self.post_json('/api/check-equivalence/', {'automatonA': self.sample_dfa})

        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()['error'], 'Missing automaton definition')

    def test_exhaustive_must_be_boolean(self):
        response = self.post_json('/api/check-equivalence/', {
            'automatonA': self.sample_dfa,
            'automatonB': self.sample_dfa,
            'exhaustive': 'yes'
        })

        self.assertEqual(response.status_code, 400)
