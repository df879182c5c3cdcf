"""Shared configuration and helpers."""
