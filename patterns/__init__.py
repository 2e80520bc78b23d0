"""Reusable patterns shared by the service verticals.

Each module is a self-contained building block: a rules engine, a status
workflow, a repository base and domain configuration.
"""
