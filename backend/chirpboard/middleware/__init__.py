"""
Chirpboard Backend: Middleware and Request Gates
================================================

Starlette middleware (every HTTP request):
    Request → [Rate Limit] → [Request ID] → [Logging] → [CORS] → route

Per-route gates (FastAPI dependencies, run before the handler body):
    strong_params.py    Field-Shape Validator: declared JSON fields only,
                        exact primitive kinds, "Bad type" → 400
    session_cookie.py   Session-Cookie Gate: signed, well-formed sessionID
                        cookie or 403
"""
