"""
Core Module

Classifier evaluation engine: container model, feature derivation and
inference. Pure and free of I/O.
"""
