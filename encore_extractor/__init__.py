"""Extracts encore build artifacts from the largest layer of a docker image."""
