"""ASGI request pipeline, response sending, and server startup."""
