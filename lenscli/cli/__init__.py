"""
Command Line Interface.

Typer command tree, per-invocation context, payload resolution,
required-flag checks and output rendering.
"""
