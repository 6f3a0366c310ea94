#!/usr/bin/env python3
"""
Wrapper para ejecutar el servidor HTTP de WP Content Studio
"""

from wpstudio.http_server import main

if __name__ == "__main__":
    main()
