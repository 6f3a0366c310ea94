import json

import httpx
import pytest

from wpstudio.models import GeneratedContent, PhotoSuggestions


class FakeWordPress:
    """Servidor WordPress simulado: registra cada petición y responde con el handler"""

    def __init__(self, handler):
        self.handler = handler
        self.requests = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return self.handler(request)

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self)

    def paths(self):
        return [(r.method, r.url.path) for r in self.requests]

    def bodies(self, method="POST"):
        return [json.loads(r.content) for r in self.requests if r.method == method]


@pytest.fixture
def fake_wp():
    def _make(handler):
        return FakeWordPress(handler)
    return _make


def route(routes, default=None):
    """Crea un handler a partir de {(método, sufijo de ruta): respuesta o callable}"""
    def handler(request):
        for (method, suffix), response in routes.items():
            if request.method == method and request.url.path.endswith(suffix):
                return response(request) if callable(response) else response
        if default is not None:
            return default
        return httpx.Response(404, json={"code": "rest_no_route", "message": "No route"})
    return handler


class FakeGenerator:
    """Generador de IA falso para las capas de acciones, HTTP y MCP"""

    def __init__(self, available=True):
        self.available = available
        self.comments = []
        self.photos = []
        self.improved = []

    def is_available(self):
        return self.available

    def generate_content_from_comment(self, comment):
        self.comments.append(comment)
        return GeneratedContent(title="Título", body="<p>Cuerpo</p>", tags=["ia", "wordpress"])

    def analyze_photo_for_content_suggestions(self, photo_data_uri):
        self.photos.append(photo_data_uri)
        return PhotoSuggestions(suggested_topics=["playa", "verano"], content_ideas=["guía de viaje"])

    def improve_existing_post(self, existing_post, desired_style):
        self.improved.append((existing_post, desired_style))
        return GeneratedContent(title="Mejorado", body="<p>Nuevo</p>", tags=["estilo"])


@pytest.fixture
def fake_generator():
    return FakeGenerator()
