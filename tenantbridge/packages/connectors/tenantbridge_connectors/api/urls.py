import re

# Userinfo ends at the first "@" inside the authority, never past "/", "?", "#" or ";".
_USERINFO_RE = re.compile(r"://([^/?#;@]+)@")
# password=... in JDBC ";key=value" segments or "?a=b&c=d" query strings.
_PASSWORD_PARAM_RE = re.compile(r"(?i)([;?&](?:password|pwd)=)[^;&#]*")


def mask_url(url: str) -> str:
    """Hide user:password sections and password parameters so the URL is safe for logs, spans and errors."""
    masked = _USERINFO_RE.sub("://***:***@", url, count=1)
    return _PASSWORD_PARAM_RE.sub(r"\1***", masked)


def apply_tenant(template: str, tenant: str) -> str:
    # Single pass: a tenant value containing "{tenant}" is left as is.
    return template.replace("{tenant}", tenant)
