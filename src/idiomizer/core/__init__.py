"""
Core Package.

The node model, the tree transformer, the debug printer and the rewrite
pipeline.
"""
