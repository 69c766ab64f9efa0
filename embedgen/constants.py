"""Static configuration data for the embedding pipeline.

Everything here is immutable and never written to at runtime.
"""

from __future__ import annotations

DEFAULT_NAMESPACE = "EmbeddedAssets"
DEFAULT_VISIBILITY = "internal"

# Template tokens
TIME_TOKEN = "{MAGIC_TIME}"
HASH_TOKEN = "{MAGIC_HASH}"
INCLUDE_PATTERN = r"\{MAGIC_FILE\s+(?P<file>.+?)\s*\}"

MAX_INCLUDE_DEPTH = 32

ENCODING_CHARS = "if1k2dLJHswO3N45"

BINARY_EXTENSIONS = frozenset({".png", ".jpg", ".jpeg", ".gif", ".bmp", ".ico", ".webp"})
TEXT_PROCESSABLE_EXTENSIONS = frozenset({".html", ".htm", ".css", ".js"})
MINIFIABLE_EXTENSIONS = frozenset({".html", ".htm", ".css", ".js"})

INDEX_FILES = ("index.html", "index.htm")
INDEX_SUFFIXES = ("/index.html", "/index.htm")

HTML_PRIORITY = 0
CSS_PRIORITY = 1
JS_PRIORITY = 2
DEFAULT_PRIORITY = 3

EXTENSION_PRIORITIES = {
    ".html": HTML_PRIORITY,
    ".htm": HTML_PRIORITY,
    ".css": CSS_PRIORITY,
    ".js": JS_PRIORITY,
}

# extension -> (content type, MediaTypeNames expression)
MIME_TYPES = {
    ".jpg": ("image/jpeg", "MediaTypeNames.Image.Jpeg"),
    ".jpeg": ("image/jpeg", "MediaTypeNames.Image.Jpeg"),
    ".gif": ("image/gif", "MediaTypeNames.Image.Gif"),
    ".bmp": ("image/bmp", "MediaTypeNames.Image.Bmp"),
    ".ico": ("image/x-icon", "MediaTypeNames.Image.Icon"),
    ".png": ("image/png", "MediaTypeNames.Image.Png"),
    ".svg": ("image/svg+xml", "MediaTypeNames.Image.Svg"),
    ".webp": ("image/webp", "MediaTypeNames.Image.Webp"),
    ".html": ("text/html", "MediaTypeNames.Text.Html"),
    ".htm": ("text/html", "MediaTypeNames.Text.Html"),
    ".css": ("text/css", "MediaTypeNames.Text.Css"),
    ".js": ("text/javascript", "MediaTypeNames.Text.JavaScript"),
    ".xml": ("text/xml", "MediaTypeNames.Text.Xml"),
}
DEFAULT_MIME_TYPE = ("text/plain", "MediaTypeNames.Text.Plain")

# Global configuration keys
KEY_NAMESPACE = "root_namespace"
KEY_VISIBILITY = "visibility"
KEY_ROUTES = "routes"
KEY_ROUTES_CACHE_CONTROL = "routes_cache_control"
KEY_MINIFY = "minify"
KEY_PROJECT_DIR = "project_dir"

GLOBAL_KEYS = (
    KEY_NAMESPACE,
    KEY_VISIBILITY,
    KEY_ROUTES,
    KEY_ROUTES_CACHE_CONTROL,
    KEY_MINIFY,
    KEY_PROJECT_DIR,
)

# Per-file configuration keys
KEY_CLASS = "class"
KEY_REMOVE_ROUTE_EXTENSION = "remove_route_extension"
KEY_CACHE_CONTROL = "cache_control"
KEY_FILE_MINIFY = "minify"

FILE_KEYS = (KEY_CLASS, KEY_REMOVE_ROUTE_EXTENSION, KEY_CACHE_CONTROL, KEY_FILE_MINIFY)

# Emitted route handlers
ROUTE_PARAMETER_FORMAT = "HttpContext context"
CACHE_CONTROL_STATEMENT = 'context.Response.Headers.CacheControl = "{0}";'

CONFIG_FILENAME = ".embedgen.yml"
CACHE_DIRNAME = ".embedgen"
CACHE_FILENAME = "artifacts.json"


def is_binary(extension: str) -> bool:
    return extension.lower() in BINARY_EXTENSIONS


def is_text_processable(extension: str) -> bool:
    return extension.lower() in TEXT_PROCESSABLE_EXTENSIONS


def is_minifiable(extension: str) -> bool:
    return extension.lower() in MINIFIABLE_EXTENSIONS
