"""
Core domain models and numerical primitives.

Normed spaces, multilinear maps, formal multilinear series and the
extended-real arithmetic they rely on. Independent of the builders and of
the convergence analysis.
"""
