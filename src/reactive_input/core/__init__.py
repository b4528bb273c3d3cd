"""
Shared infrastructure: errors, logging, configuration, localization and threaded rounds.
"""
