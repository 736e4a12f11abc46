"""auth/ -- Credential validation, password hashing and token signing for authcore.

Layer rule: auth/ imports only stdlib + third-party libraries.
It does NOT import from core/ -- callers build components from settings via
the from_settings() constructors. main.py imports from both.
"""
