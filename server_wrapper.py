#!/usr/bin/env python3
"""
Wrapper para ejecutar el servidor MCP de WP Content Studio en modo stdio
"""

import asyncio
from wpstudio.server import main

if __name__ == "__main__":
    asyncio.run(main())
