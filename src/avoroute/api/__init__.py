"""HTTP API: application factory, exception handlers and health routes."""
