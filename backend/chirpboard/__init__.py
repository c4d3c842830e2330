"""
Chirpboard Backend: Application Package
=======================================

What:  Message-board API. Users register, log in, post short entries,
       reply to entries and receive new entries live over a WebSocket.
Who:   Imported by uvicorn (`chirpboard.main:app`), Alembic and pytest.

Layering:

    ┌─────────────────────────────────────┐
    │   Routes (HTTP + WebSocket)         │  ← status codes, cookies
    ├─────────────────────────────────────┤
    │   Gates (middleware/)               │  ← strong params, session cookie
    ├─────────────────────────────────────┤
    │   Services                          │  ← accounts, sessions, content
    ├─────────────────────────────────────┤
    │   Models, validators, schemas       │  ← ORM rows, entity rules, API shapes
    ├─────────────────────────────────────┤
    │   Database                          │  ← async SQLAlchemy, injected
    └─────────────────────────────────────┘
"""

__version__ = "1.0.0"
