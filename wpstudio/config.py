"""
Configuración del servicio
Todas las variables de entorno se leen aquí (admite archivo .env)
"""

import os
from dotenv import load_dotenv

# Cargar variables de entorno
load_dotenv()

# === WordPress ===
WP_URL = os.getenv('WP_URL')
WP_USER = os.getenv('WP_USER') or os.getenv('WP_USERNAME')
WP_APP_PASSWORD = os.getenv('WP_APP_PASSWORD') or os.getenv('WP_PASSWORD')
WP_TIMEOUT = float(os.getenv('WP_TIMEOUT', '30'))

# === IA (API compatible con OpenAI, Groq por defecto) ===
AI_API_KEY = os.getenv('AI_API_KEY') or os.getenv('GROQ_API_KEY')
AI_BASE_URL = os.getenv('AI_BASE_URL', 'https://api.groq.com/openai/v1')
AI_MODEL = os.getenv('AI_MODEL', 'llama-3.3-70b-versatile')
AI_VISION_MODEL = os.getenv('AI_VISION_MODEL', 'meta-llama/llama-4-scout-17b-16e-instruct')
AI_TIMEOUT = int(os.getenv('AI_TIMEOUT', '120'))

# === Historial y conexiones ===
STORE_PATH = os.getenv('STORE_PATH', 'data/wpstudio.sqlite3')

# === Servidor ===
LOG_LEVEL = os.getenv('LOG_LEVEL', 'INFO')
PORT = int(os.getenv('PORT', 8000))
