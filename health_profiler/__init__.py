"""
Health risk profiler package.

Design intent:
- Turn a lifestyle survey into a scored, explained risk profile, whether it
  arrives as text or as a scanned form.
- Keep domain modules (intake/guardrails/risk/recommendations) independent of the HTTP layer.
"""
