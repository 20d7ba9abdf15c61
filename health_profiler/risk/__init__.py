"""
Risk interpretation boundary.

Design intent:
- Convert a validated answer set into named factors and a bounded score.
- Keep every rule deterministic and explainable.
- Avoid diagnostic language; this is a classification engine.
"""
