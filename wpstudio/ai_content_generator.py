"""
Generador de Contenido con IA
Crea títulos, contenido y etiquetas para WordPress usando un API compatible con OpenAI (Groq por defecto)
"""

import re
import json
import logging
from typing import Any, Dict, List, Optional

import requests
from pydantic import ValidationError

from . import config
from .exceptions import ContentGenerationError
from .models import GeneratedContent, PhotoSuggestions

logger = logging.getLogger(__name__)

JSON_ONLY = "Respond ONLY with a valid JSON object. Do not include any text outside the JSON."

COMMENT_PROMPT = """You are an AI assistant that generates WordPress content based on user comments.

Based on the following comment, generate a title, body, and suggested tags for a WordPress post.

The title should be concise and engaging.
The body should be informative and well-written, formatted as HTML (<h2>, <h3>, <p>, <ul>, <li>, <strong>, <em>).
The tags should be relevant and helpful for SEO.

Ensure that the title, body and tags are appropriate and professional.
Write in the same language as the comment.

{json_only} Use this structure:
{{
    "title": "Post title",
    "body": "Post body in HTML",
    "tags": ["tag1", "tag2", "tag3"]
}}"""

PHOTO_PROMPT = """You are an expert content strategist for WordPress. Analyze the photo provided and suggest relevant topics and content ideas for a WordPress post.

{json_only} Use this structure:
{{
    "suggested_topics": ["topic 1", "topic 2"],
    "content_ideas": ["idea 1", "idea 2"]
}}"""

IMPROVE_PROMPT = """You are an expert blog post writer. You will rewrite the existing blog post to match the desired style.
You must also generate a new, catchy title for the post and a list of relevant tags.
Keep the language of the existing post.

{json_only} Use this structure:
{{
    "title": "New title",
    "body": "Rewritten post body in HTML",
    "tags": ["tag1", "tag2", "tag3"]
}}"""


def clean_json_reply(content: str) -> str:
    """
    Limpia la respuesta del modelo para poder parsearla como JSON

    Quita bloques de código markdown y escapa saltos de línea literales dentro de strings.
    """
    content_clean = content.strip()
    if content_clean.startswith("```"):
        content_clean = re.sub(r'^```(?:json)?\s*\n?', '', content_clean)
        content_clean = re.sub(r'\n?```\s*$', '', content_clean)

    in_string = False
    escape_next = False
    result_chars = []

    for char in content_clean:
        if escape_next:
            result_chars.append(char)
            escape_next = False
            continue

        if char == '\\':
            escape_next = True
            result_chars.append(char)
            continue

        if char == '"':
            in_string = not in_string
            result_chars.append(char)
            continue

        if in_string and char == '\n':
            result_chars.append('\\n')
        elif in_string and char == '\r':
            continue
        elif in_string and char == '\t':
            result_chars.append('\\t')
        else:
            result_chars.append(char)

    return ''.join(result_chars)


class AIContentGenerator:
    """Generador de contenido usando chat completions"""

    def __init__(self, api_key: Optional[str] = None, base_url: Optional[str] = None,
                 model: Optional[str] = None, vision_model: Optional[str] = None,
                 timeout: Optional[int] = None):
        self.api_key = api_key if api_key is not None else config.AI_API_KEY
        self.base_url = (base_url or config.AI_BASE_URL).rstrip('/')
        self.model = model or config.AI_MODEL
        self.vision_model = vision_model or config.AI_VISION_MODEL
        self.timeout = timeout or config.AI_TIMEOUT

        if self.is_available():
            logger.info(f"Generador de contenido inicializado ({self.model})")
        else:
            logger.warning("⚠️ Generador de IA no disponible (falta AI_API_KEY)")

    def is_available(self) -> bool:
        """Verifica si el generador de IA está disponible"""
        return bool(self.api_key)

    def _chat(self, messages: List[Dict[str, Any]], model: Optional[str] = None) -> str:
        """Llama al endpoint de chat completions y devuelve el texto de la respuesta"""
        if not self.is_available():
            raise ContentGenerationError("Generador de IA no disponible. Configure AI_API_KEY")

        headers = {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json"
        }
        payload = {
            "model": model or self.model,
            "messages": messages,
            "response_format": {"type": "json_object"}
        }

        try:
            response = requests.post(
                f"{self.base_url}/chat/completions",
                headers=headers,
                json=payload,
                timeout=self.timeout
            )
            response.raise_for_status()
            content = response.json()["choices"][0]["message"]["content"]
        except requests.RequestException as e:
            raise ContentGenerationError(f"Error llamando al modelo: {e}") from e
        except (KeyError, IndexError, TypeError, ValueError) as e:
            raise ContentGenerationError(f"Respuesta inesperada del modelo: {e}") from e

        logger.info(f"Contenido generado exitosamente ({len(content)} caracteres)")
        logger.debug(f"Contenido: {content[:200]}...")
        return content

    def _parse(self, content: str) -> Dict[str, Any]:
        try:
            result = json.loads(clean_json_reply(content))
        except json.JSONDecodeError as e:
            logger.error(f"Error al parsear JSON del modelo: {e}")
            logger.error(f"Respuesta recibida: {content[:500]}")
            raise ContentGenerationError("El modelo no devolvió un JSON válido") from e

        if not isinstance(result, dict):
            raise ContentGenerationError("El modelo no devolvió un objeto JSON")
        return result

    def _to_generated_content(self, content: str) -> GeneratedContent:
        result = self._parse(content)
        # Algunos modelos usan "content" en lugar de "body"
        if 'body' not in result and 'content' in result:
            result['body'] = result.pop('content')
        try:
            generated = GeneratedContent(
                title=result.get('title'),
                body=result.get('body'),
                tags=result.get('tags') or [],
            )
        except ValidationError as e:
            raise ContentGenerationError(f"La respuesta no contiene todos los campos requeridos: {e}") from e

        logger.info(f"Titulo: {generated.title}")
        logger.info(f"Tags: {generated.tags}")
        return generated

    def generate_content_from_comment(self, comment: str) -> GeneratedContent:
        """
        Genera título, contenido y etiquetas a partir de un comentario

        Args:
            comment: Idea o comentario del usuario

        Returns:
            GeneratedContent con title, body y tags
        """
        logger.info(f"Generando contenido para: {comment[:50]}...")
        content = self._chat([
            {"role": "system", "content": COMMENT_PROMPT.format(json_only=JSON_ONLY)},
            {"role": "user", "content": f"Comment: {comment}"}
        ])
        return self._to_generated_content(content)

    def analyze_photo_for_content_suggestions(self, photo_data_uri: str) -> PhotoSuggestions:
        """
        Analiza una foto y sugiere temas e ideas de contenido

        Args:
            photo_data_uri: Foto como data URI ('data:<mimetype>;base64,<datos>')
        """
        logger.info("Analizando foto...")
        content = self._chat([
            {"role": "system", "content": PHOTO_PROMPT.format(json_only=JSON_ONLY)},
            {"role": "user", "content": [
                {"type": "text", "text": "Photo:"},
                {"type": "image_url", "image_url": {"url": photo_data_uri}}
            ]}
        ], model=self.vision_model)

        result = self._parse(content)
        try:
            return PhotoSuggestions.model_validate(result)
        except ValidationError as e:
            raise ContentGenerationError(f"Sugerencias con formato inesperado: {e}") from e

    def improve_existing_post(self, existing_post: str, desired_style: str) -> GeneratedContent:
        """Reescribe un post existente con el estilo deseado, con nuevo título y etiquetas"""
        logger.info(f"Mejorando contenido con estilo: {desired_style[:50]}")
        content = self._chat([
            {"role": "system", "content": IMPROVE_PROMPT.format(json_only=JSON_ONLY)},
            {"role": "user", "content": f"Existing Blog Post:\n{existing_post}\n\nDesired Style:\n{desired_style}"}
        ])
        return self._to_generated_content(content)
