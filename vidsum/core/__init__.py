"""
Core business logic for accounts and videos.

This module is framework-agnostic - it doesn't import FastAPI, Snowflake,
or any infrastructure concerns. Services depend on protocols that the
infrastructure layer implements.
"""
