"""Shared constants for the rcprov tools."""

from pathlib import Path

# RunCloud API
API_BASE = "https://manage.runcloud.io/api/v3"

# CLI label -> API stack token
STACKS = {
    "nginx": "nativenginx",  # Pure Nginx
    "apache": "hybrid",  # Nginx + Apache proxy
}
CUSTOM_STACK = "customnginx"

# CLI label -> API PHP version token
PHP_VERSIONS = {
    "7.4": "php74rc",
    "8.0": "php80rc",
    "8.1": "php81rc",
    "8.2": "php82rc",
    "8.3": "php83rc",
    "8.4": "php84rc",
}

# Defaults (overridable via env vars / CLI flags)
DEFAULT_APP_TYPE = "wordpress"
DEFAULT_ADMIN_USER = "admin"
DEFAULT_PHP = "8.2"
DEFAULT_STACK = "nginx"
DEFAULT_INSTALL_HUB = True
DEFAULT_HUB_TYPE = "native"
DEFAULT_REDIS_OBJECT = False
DEFAULT_INSTALL_SSL = False
DEFAULT_UNRESTRICTED_PHP = False

# WordPress payload
WP_DB_PREFIX = "wp_"
STACK_MODE = "production"

# RunCloud Hub
HUB_CACHE_FOLDER_SIZE = 50
HUB_CACHE_VALID_MINUTES = 480

# Seconds to wait after creation before touching the new app's files
PROPAGATION_DELAY = 5.0

# Reverse proxy (nginx-rc)
PROXY_CONFIG_DIR = Path("/etc/nginx-rc/extra.d")
PROXY_FILE_SUFFIX = ".location.root.server.conf"
PROXY_START_PORT = 3000
NGINX_TEST_CMD = ["nginx-rc", "-t"]
NGINX_RELOAD_CMD = ["systemctl", "reload", "nginx-rc"]
