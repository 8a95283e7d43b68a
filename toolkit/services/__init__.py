"""
Request-level helpers for FastAPI/Starlette handlers.

Each module takes a starlette Request (what FastAPI injects) and either returns
plain values or a Response the handler can return as is. Nothing here keeps
state between requests.
"""
