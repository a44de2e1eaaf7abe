"""
HTTP layer: FastAPI routers, request/response models and dependency wiring.
"""
