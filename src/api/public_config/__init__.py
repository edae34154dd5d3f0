"""Public Config bounded context.

Resolves, caches and gates the per-tenant public menu configuration:
which languages a visitor may use and which one to render first.
"""
