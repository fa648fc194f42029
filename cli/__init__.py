"""Command-line tools for running and exercising the sensor API."""
