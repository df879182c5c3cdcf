"""Headless browser rendering and job control."""
