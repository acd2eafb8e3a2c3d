"""Python client for the Mise API."""
