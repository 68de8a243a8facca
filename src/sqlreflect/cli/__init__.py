"""Command line interface for sqlreflect."""
