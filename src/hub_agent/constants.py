"""Constants for the Hub agent."""

# API Groups
API_GROUP = "hub.traefik.io"
API_GROUP_VERSION = f"{API_GROUP}/v1alpha1"
TRAEFIK_API_GROUP = "traefik.containo.us"
TRAEFIK_API_GROUP_VERSION = f"{TRAEFIK_API_GROUP}/v1alpha1"

# Resource Kinds
KIND_GATEWAY = "APIGateway"
KIND_ACCESS = "APIAccess"
KIND_COLLECTION = "APICollection"
KIND_API = "API"
KIND_PORTAL = "APIPortal"
KIND_INGRESS = "Ingress"
KIND_MIDDLEWARE = "Middleware"
KIND_SECRET = "Secret"

# Labels
LABEL_MANAGED_BY = "app.kubernetes.io/managed-by"
MANAGED_BY_VALUE = "traefik-hub"

# Annotations
ANNOTATION_ROUTER_TLS = "traefik.ingress.kubernetes.io/router.tls"
ANNOTATION_ROUTER_ENTRYPOINTS = "traefik.ingress.kubernetes.io/router.entrypoints"
ANNOTATION_ROUTER_MIDDLEWARES = "traefik.ingress.kubernetes.io/router.middlewares"
ANNOTATION_HUB_AUTH = f"{API_GROUP}/access-control-policy"
ANNOTATION_HUB_AUTH_GROUP = f"{API_GROUP}/access-control-policy-groups"

# Access control policy enforced on every gateway ingress
HUB_AUTH_POLICY_NAME = "hub-api-management"

# Secrets
HUB_DOMAIN_SECRET_NAME = "hub-certificate"
CUSTOM_DOMAIN_SECRET_NAME_PREFIX = "hub-certificate-custom-domains"
PORTAL_CUSTOM_DOMAIN_SECRET_NAME_PREFIX = "hub-certificate-portal-custom-domains"
SECRET_TYPE_TLS = "kubernetes.io/tls"
TLS_CERT_KEY = "tls.crt"
TLS_KEY_KEY = "tls.key"

# Field Manager
FIELD_MANAGER = "hub-agent"

# Controller name used in structured logs
CONTROLLER_NAME = "hub-agent"

# Delete propagation
PROPAGATION_FOREGROUND = "Foreground"

# Event Reasons
EVENT_REASON_SYNCED = "Synced"
EVENT_REASON_SYNC_FAILED = "Failed"
