"""Yarnitt order REST API."""
