"""Pose provider implementations.

Submodules are imported on demand so a missing camera stack does not block
the Tk slider provider.
"""
