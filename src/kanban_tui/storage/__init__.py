"""Persistence: local JSON save files and the cloud client interface."""
