"""
Sentinel test suite.

- Sentinel, registry and built-in sentinel tests
- Guard and access control dispatch tests
- Controller integration and view helper tests
- Framework integration tests
"""
