"""Durable storage backends."""
