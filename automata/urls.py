from django.urls import path
from . import views

urlpatterns = [
    # Auto-detect automaton type and test membership accordingly
    path('api/evaluate/', views.evaluate, name='evaluate'),

    # Specific evaluators
    path('api/simulate-dfa/', views.simulate_dfa, name='simulate_dfa'),
    path('api/simulate-nfa/', views.simulate_nfa, name='simulate_nfa'),

    # Classification and structural properties
    path('api/classify/', views.classify_automaton, name='classify'),
    path('api/check-properties/', views.check_properties, name='check_properties'),

    # Language equivalence of two DFAs
    path('api/check-equivalence/', views.check_equivalence, name='check_equivalence'),
]
