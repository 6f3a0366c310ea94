#!/usr/bin/env python3
"""
Servidor MCP de WP Content Studio
Expone la generación de contenido con IA y la publicación en WordPress como herramientas MCP
"""

import json
import sys
import logging
from typing import Any, Dict, List, Optional

from mcp.server import Server
from mcp.server.stdio import stdio_server
from mcp.types import Tool, TextContent
from pydantic import ValidationError

from . import config
from .actions import (
    generate_from_comment_action,
    generate_from_photo_action,
    get_wordpress_post_action,
    improve_post_action,
    publish_to_wordpress_action,
    search_wordpress_posts_action,
)
from .ai_content_generator import AIContentGenerator
from .exceptions import ContentGenerationError, WordPressError
from .models import GeneratedContent, SiteCredentials

logger = logging.getLogger(__name__)

POST_TYPE_SCHEMA = {
    "type": "string",
    "enum": ["posts", "pages"],
    "description": "Colección destino: posts o pages (default: posts)",
    "default": "posts"
}

TOOLS = [
    Tool(
        name="generate_content",
        description="Genera título, contenido y etiquetas con IA a partir de un comentario, sin publicar",
        inputSchema={
            "type": "object",
            "properties": {
                "comment": {"type": "string", "description": "Idea o comentario sobre el tema"}
            },
            "required": ["comment"]
        }
    ),
    Tool(
        name="generate_from_photo",
        description="Analiza una foto y genera un post completo a partir de ella",
        inputSchema={
            "type": "object",
            "properties": {
                "photo_data_uri": {
                    "type": "string",
                    "description": "Foto como data URI: 'data:<mimetype>;base64,<datos>'"
                }
            },
            "required": ["photo_data_uri"]
        }
    ),
    Tool(
        name="improve_post",
        description="Reescribe un post existente con el estilo deseado (nuevo título y etiquetas)",
        inputSchema={
            "type": "object",
            "properties": {
                "existing_post": {"type": "string", "description": "Contenido actual del post"},
                "desired_style": {"type": "string", "description": "Estilo deseado (ej: 'casual y cercano')"}
            },
            "required": ["existing_post", "desired_style"]
        }
    ),
    Tool(
        name="publish_content",
        description="Publica contenido en WordPress, o lo actualiza si se indica post_id",
        inputSchema={
            "type": "object",
            "properties": {
                "title": {"type": "string", "description": "Título"},
                "body": {"type": "string", "description": "Contenido (HTML permitido)"},
                "tags": {
                    "type": "array",
                    "items": {"type": "string"},
                    "description": "Nombres de etiquetas (se crean si no existen, solo posts)"
                },
                "post_id": {"type": "string", "description": "ID a actualizar; vacío para crear"},
                "post_type": POST_TYPE_SCHEMA
            },
            "required": ["title", "body"]
        }
    ),
    Tool(
        name="search_content",
        description="Busca posts o páginas publicados por término",
        inputSchema={
            "type": "object",
            "properties": {
                "query": {"type": "string", "description": "Término de búsqueda"},
                "post_type": POST_TYPE_SCHEMA
            },
            "required": ["query"]
        }
    ),
    Tool(
        name="get_content",
        description="Obtiene un post o página por ID",
        inputSchema={
            "type": "object",
            "properties": {
                "post_id": {"type": "integer", "description": "ID del post o página"},
                "post_type": POST_TYPE_SCHEMA
            },
            "required": ["post_id"]
        }
    ),
]


def _text(result: Any) -> List[TextContent]:
    return [TextContent(type="text", text=json.dumps(result, indent=2, ensure_ascii=False))]


class WordPressMCPServer:
    """Servidor MCP para WordPress con IA integrada"""

    def __init__(self, credentials: Optional[SiteCredentials] = None,
                 ai_generator: Optional[AIContentGenerator] = None, transport=None):
        self.server = Server("wordpress-content-studio")
        self.credentials = credentials or SiteCredentials(
            config.WP_URL or '', config.WP_USER or '', config.WP_APP_PASSWORD or ''
        )
        self.ai_generator = ai_generator or AIContentGenerator()
        self.transport = transport

        self.setup_handlers()

    async def dispatch(self, name: str, arguments: Dict[str, Any]) -> Any:
        """Ejecuta una herramienta y devuelve un resultado serializable a JSON"""
        if name == "generate_content":
            return generate_from_comment_action(self.ai_generator, arguments.get('comment', '')).model_dump()

        if name == "generate_from_photo":
            return generate_from_photo_action(self.ai_generator, arguments.get('photo_data_uri', '')).model_dump()

        if name == "improve_post":
            return improve_post_action(
                self.ai_generator,
                arguments.get('existing_post', ''),
                arguments.get('desired_style', '')
            ).model_dump()

        if name == "publish_content":
            content = GeneratedContent(
                title=arguments['title'],
                body=arguments['body'],
                tags=arguments.get('tags') or [],
                post_id=arguments.get('post_id'),
                post_type=arguments.get('post_type', 'posts')
            )
            result = await publish_to_wordpress_action(content, self.credentials, transport=self.transport)
            return {"success": True, "post_url": result.post_url, "post_id": result.post_id}

        if name == "search_content":
            posts = await search_wordpress_posts_action(
                arguments.get('query', ''), self.credentials,
                arguments.get('post_type', 'posts'), transport=self.transport
            )
            return [post.model_dump() for post in posts]

        if name == "get_content":
            post = await get_wordpress_post_action(
                arguments.get('post_id'), self.credentials,
                arguments.get('post_type', 'posts'), transport=self.transport
            )
            return post.model_dump()

        raise ValueError(f"Herramienta desconocida: {name}")

    def setup_handlers(self):
        """Configura los handlers del servidor MCP"""

        @self.server.list_tools()
        async def list_tools() -> List[Tool]:
            return TOOLS

        @self.server.call_tool()
        async def call_tool(name: str, arguments: dict) -> List[TextContent]:
            try:
                return _text(await self.dispatch(name, arguments or {}))
            except (WordPressError, ContentGenerationError, ValidationError, ValueError, KeyError) as e:
                logger.error(f"❌ Error ejecutando {name}: {e}")
                return _text({"error": str(e)})

    async def run(self):
        """Inicia el servidor MCP"""
        if not self.credentials.is_complete():
            print("ERROR: Debes configurar WP_URL, WP_USER y WP_APP_PASSWORD", file=sys.stderr)
            sys.exit(1)

        logger.info(f"WordPress MCP Server inicializado: {self.credentials.site_url}")

        async with stdio_server() as (read_stream, write_stream):
            await self.server.run(
                read_stream,
                write_stream,
                self.server.create_initialization_options()
            )


async def main():
    """Punto de entrada principal"""
    # stdout lo usa el protocolo MCP, los logs van a stderr
    logging.basicConfig(
        level=config.LOG_LEVEL,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        stream=sys.stderr
    )
    server = WordPressMCPServer()
    await server.run()


if __name__ == "__main__":
    import asyncio

    asyncio.run(main())
