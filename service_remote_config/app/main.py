"""
Remote Config engine bootstrap.
"""

from typing import Mapping, Optional, Union

from shared.config import RemoteConfigSettings, get_settings
from shared.logging import configure_logging, get_logger

from .server_template import ServerTemplate
from .template.data import ServerTemplateData


def create_server_template(
    default_config: Optional[Mapping[str, str]] = None,
    cached_template: Optional[Union[str, ServerTemplateData]] = None,
    settings: Optional[RemoteConfigSettings] = None,
) -> ServerTemplate:
    """Configure logging from settings and build a ServerTemplate."""
    settings = settings or get_settings()
    configure_logging(
        settings.service_name,
        log_level=settings.log_level,
        renderer=settings.log_renderer,
    )

    logger = get_logger("remote_config.main")
    logger.info("Remote Config engine starting", env=settings.env)

    return ServerTemplate(default_config=default_config, cached_template=cached_template)
