"""Email delivery port."""

from abc import ABC, abstractmethod
from typing import Any, Mapping


class IMailer(ABC):
    """Renders a named template and delivers it to one recipient."""

    @abstractmethod
    async def send(self, recipient: str, template_name: str, data: Mapping[str, Any]) -> None:
        """Render `template_name` with `data` and deliver it to `recipient`.

        Raises:
            TemplateRenderError: If the template or one of its fragments is
                missing or malformed.
            EmailDeliveryError: Only in strict delivery mode, after every
                attempt has failed.
        """
        raise NotImplementedError
