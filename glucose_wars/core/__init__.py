"""Pure simulation core: models, the lifecycle machine and the `transition` reducer.

Kept free of FastAPI, Redis and clocks so the session clock and the tests can drive it directly.
"""
