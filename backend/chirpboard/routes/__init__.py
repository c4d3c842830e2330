"""
Chirpboard Backend: Routes Package
==================================

Route Inventory:
    - users.py:    GET  /requiredCookieRoute, POST /user,
                   POST /user/isValid, POST /user/logout
    - entries.py:  POST /entry, GET /entry, POST /reply
    - live.py:     WS   /ws
    - health.py:   GET  /health

Routes stay thin: gates run as dependencies, business rules live in the
services.
"""
