"""
Infrastructure layer.

Provides concrete implementations of domain interfaces using external
frameworks and libraries.
"""
