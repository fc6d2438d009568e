"""Pydantic schemas for nodes, render outcomes and the HTTP API."""
