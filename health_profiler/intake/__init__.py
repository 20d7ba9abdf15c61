"""
Survey intake boundary.

Design intent:
- Normalize raw survey text into a partial answer set.
- Report which required fields are missing and how reliable the extraction is.
"""
