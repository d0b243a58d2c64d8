"""Command line interface for the XAX database tools."""
