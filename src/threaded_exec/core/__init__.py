"""Ports shared by the execution core and its collaborators."""
