"""Domain layer for DinePick.

Pure models, errors, and decision rules. Nothing in this package
performs I/O or reads the wall clock.
"""
