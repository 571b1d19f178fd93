"""Test generation package"""
from .archetypes import Archetype, CATALOGUE
from .synthetic import SyntheticTestGenerator, generate
from .normalize import normalize_test, parse_model_output

__all__ = [
    "Archetype",
    "CATALOGUE",
    "SyntheticTestGenerator",
    "generate",
    "normalize_test",
    "parse_model_output",
]
