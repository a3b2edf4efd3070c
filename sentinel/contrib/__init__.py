"""
Framework integrations for Sentinel.

Each integration lives in its own module and imports its framework
directly, so only import the ones whose dependencies are installed:

    - sentinel.contrib.starlette: guarded Starlette ``HTTPEndpoint``
"""
