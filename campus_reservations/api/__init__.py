"""HTTP API support: FastAPI dependencies shared by the route modules."""
