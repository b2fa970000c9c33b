"""
The ANALYSIS layer holds the simulation grid and everything computed on it:
masked per-node property fields, shape rasterization, and field derivation.
"""
