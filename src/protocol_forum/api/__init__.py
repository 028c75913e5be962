"""HTTP API for the Protocol Forum application."""
