from estimate_dashboard.config.base import AppSettings
from estimate_dashboard.type_defs import JsonObject


def _mask(secret: object) -> str:
    if not secret:
        return ""
    secret = str(secret)
    return f"{secret[:4]}..." if len(secret) > 8 else "***"


def display_settings(settings: AppSettings) -> list[dict[str, str | JsonObject]]:
    remote_fields = settings.remote.to_dict()
    remote_fields["token"] = _mask(settings.remote.token)
    remote_fields["endpoint_url"] = settings.remote.endpoint_url
    remote_fields["configured"] = settings.remote.configured

    return [
        {
            "section": "Remote",
            "fields": remote_fields,
        },
        {
            "section": "Storage",
            "fields": settings.storage.to_dict(),
        },
    ]
