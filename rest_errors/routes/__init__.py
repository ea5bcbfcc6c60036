"""Example API routes."""
