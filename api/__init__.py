"""HTTP API for PDF jobs and generated files."""
