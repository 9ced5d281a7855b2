"""
Roast Relay package.

Provides:
- OAuth authorization-code exchange that keeps the client secret server-side
- Roast generation via the Gemini content-generation API
"""
