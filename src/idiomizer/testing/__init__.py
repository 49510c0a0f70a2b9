"""
Testing Support Package.

A reference evaluator for checking semantic equivalence of rewrites and
hypothesis strategies generating statement lists.
"""
