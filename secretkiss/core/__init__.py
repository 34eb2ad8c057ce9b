"""Game engine primitives (clock, principal, kissing, score, hearts, session).

Kept free of FastAPI concerns so it can be driven by the API host, scripts, and tests.
"""
