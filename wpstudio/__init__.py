"""
WP Content Studio
Genera contenido para WordPress con IA y lo publica usando el REST API
"""

__version__ = "1.0.0"
