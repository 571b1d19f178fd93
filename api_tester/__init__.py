"""
API Pointer Tester - expands a natural-language test pointer into API request
variations, scores the generated suite and runs it against a real or simulated API.
"""

__version__ = "1.0.0"
