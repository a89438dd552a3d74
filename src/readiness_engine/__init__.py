"""Readiness assessment engine.

Turns per-topic current/target ratings into dimension and organisation
scores, ranked capability gaps, a maturity stage, matched recommendations
and a templated narrative summary. Every entry point is a stateless
transformation of the definitions and ratings snapshot it is given.
"""

__version__ = "0.1.0"
