"""
Command groups for the povboard CLI.
"""
