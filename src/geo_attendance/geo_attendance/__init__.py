"""Geo attendance engine.

Feature modules (scans, sessions, settings, sites, users) each keep a model,
a repository interface with its MySQL implementation, a service layer and a
thin Flask controller.
"""
