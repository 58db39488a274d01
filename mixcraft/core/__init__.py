"""
Shared value types, parameter ranges and JSON loaders.
"""
