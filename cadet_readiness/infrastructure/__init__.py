"""
Infrastructure layer.

Adapters between the outside world (configuration files on disk) and the
core scoring engine. Nothing in core imports from here.
"""
