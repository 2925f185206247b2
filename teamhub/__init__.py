"""TeamHub API - project and team management backend"""

__version__ = "0.1.0"
