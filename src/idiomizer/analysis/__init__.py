"""
Analysis Package.

Scope-aware usage analysis, scope structure helpers and purity checks.
"""
