"""Dependency-ordered script deployment engine."""
