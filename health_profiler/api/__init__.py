"""
API orchestration boundary for the health risk profiler.

Design intent:
- Expose thin, typed endpoints for survey text and survey images.
- Keep request validation explicit and failure modes predictable.
- Orchestrate modules without embedding domain logic in routers.
"""
