"""
Guardrail boundary: hard accept/reject gates applied before any scoring.
"""
