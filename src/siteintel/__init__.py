"""Gym site intelligence service."""
