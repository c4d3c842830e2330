"""
Chirpboard Backend: Services Layer
==================================

What:  Business logic between the routes (HTTP/WebSocket) and the store.

Service Inventory:
    - AccountService:  registration, bcrypt hashing, credential checks
    - SessionService:  token minting, session lookup and revocation
    - ContentService:  entries and replies
    - LiveUpdateHub:   open WebSocket listeners and fan-out of new entries

Services take the AsyncSession as an argument and hold no per-request
state, so one module-level instance of each is shared by all requests.
"""
