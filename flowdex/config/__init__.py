"""Configuration: settings, constants and database wiring."""
