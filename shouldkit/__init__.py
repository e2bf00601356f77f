"""
shouldkit - Declarative test-generation macros for pytest.

One-line declarations expand into concrete test cases that interrogate a
live object (a validated record, an HTTP response, a rendered template).

Usage:
    shouldkit probes length_range --min 3 --max 10   # Preview boundary probes
    shouldkit messages --preset pydantic             # Show a message table
    shouldkit expand declarations.yaml --run         # Expand and run a file
"""

__version__ = "0.1.0"
