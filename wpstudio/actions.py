"""
Acciones de contenido
Valida la entrada, llama al generador de IA o a WordPress y traduce los errores para el usuario
"""

import logging
from typing import List, Optional

import httpx

from .ai_content_generator import AIContentGenerator
from .exceptions import ContentGenerationError
from .models import GeneratedContent, PhotoSuggestions, PublishResult, SiteCredentials, WpPost
from .wordpress import WordPressAPI

logger = logging.getLogger(__name__)


def build_photo_prompt(suggestions: PhotoSuggestions) -> str:
    """Convierte las sugerencias de una foto en un comentario para generar el post"""
    topics = '\n- '.join(suggestions.suggested_topics)
    ideas = '\n- '.join(suggestions.content_ideas)
    return (
        "Based on an analysis of a provided image, please generate a blog post.\n\n"
        "Key themes and topics identified from the image:\n"
        f"- {topics}\n\n"
        "Specific content ideas to explore:\n"
        f"- {ideas}\n\n"
        "Use these points as inspiration to write a compelling and relevant blog post "
        "with a title, body, and tags."
    )


def generate_from_comment_action(generator: AIContentGenerator, comment: str) -> GeneratedContent:
    if not comment or not comment.strip():
        raise ValueError("El comentario no puede estar vacío")

    try:
        return generator.generate_content_from_comment(comment)
    except ContentGenerationError as e:
        logger.error(f"❌ Error generando contenido desde comentario: {e}")
        raise ContentGenerationError("No se pudo generar el contenido. Inténtalo de nuevo") from e


def generate_from_photo_action(generator: AIContentGenerator, photo_data_uri: str) -> GeneratedContent:
    """Analiza la foto y genera el post completo a partir de las sugerencias (dos llamadas)"""
    if not photo_data_uri:
        raise ValueError("La foto no puede estar vacía")

    try:
        suggestions = generator.analyze_photo_for_content_suggestions(photo_data_uri)
        return generator.generate_content_from_comment(build_photo_prompt(suggestions))
    except ContentGenerationError as e:
        logger.error(f"❌ Error generando contenido desde foto: {e}")
        raise ContentGenerationError("No se pudo generar el contenido a partir de la foto. Inténtalo de nuevo") from e


def improve_post_action(generator: AIContentGenerator, existing_post: str, desired_style: str) -> GeneratedContent:
    if not existing_post or not desired_style:
        raise ValueError("El post existente y el estilo deseado no pueden estar vacíos")

    try:
        return generator.improve_existing_post(existing_post, desired_style)
    except ContentGenerationError as e:
        logger.error(f"❌ Error mejorando post: {e}")
        raise ContentGenerationError("No se pudo mejorar el post. Inténtalo de nuevo") from e


# === WordPress ===

def _client(credentials: SiteCredentials,
            transport: Optional[httpx.AsyncBaseTransport] = None) -> WordPressAPI:
    return WordPressAPI(
        credentials.site_url,
        credentials.username,
        credentials.application_password,
        transport=transport,
    )


async def publish_to_wordpress_action(content: GeneratedContent, credentials: SiteCredentials,
                                      transport: Optional[httpx.AsyncBaseTransport] = None) -> PublishResult:
    return await _client(credentials, transport).publish(content)


async def search_wordpress_posts_action(query: str, credentials: SiteCredentials, post_type: str = 'posts',
                                        transport: Optional[httpx.AsyncBaseTransport] = None) -> List[WpPost]:
    return await _client(credentials, transport).search(query, post_type)


async def get_wordpress_post_action(post_id: Optional[int], credentials: SiteCredentials,
                                    post_type: str = 'posts',
                                    transport: Optional[httpx.AsyncBaseTransport] = None) -> WpPost:
    return await _client(credentials, transport).get_post(post_id, post_type)
