"""
HTTP layer: FastAPI routes, request/response schemas and dependencies.

Routes translate JSON into core dataclasses and results back into JSON.
No scoring happens here.
"""
