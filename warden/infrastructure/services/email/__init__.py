from warden.infrastructure.services.email.mailer import Mailer
from warden.infrastructure.services.email.templates import RenderedMessage, TemplateBundle, load_template_bundle

__all__ = ["Mailer", "RenderedMessage", "TemplateBundle", "load_template_bundle"]
