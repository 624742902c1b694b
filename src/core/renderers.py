"""Renderer for browser clients.

Templating is out of scope for this backend, so pages are a minimal HTML
document with the pending flash messages and the payload pretty-printed.
"""

import json

from django.contrib.messages import get_messages
from django.utils.html import escape
from rest_framework import renderers
from rest_framework.utils.encoders import JSONEncoder


class PageRenderer(renderers.BaseRenderer):
    media_type = "text/html"
    format = "html"
    charset = "utf-8"

    def render(self, data, accepted_media_type=None, renderer_context=None) -> bytes:
        renderer_context = renderer_context or {}
        request = renderer_context.get("request")

        flashes = ""
        if request is not None:
            items = "".join(
                f'<li class="{escape(message.tags)}">{escape(message)}</li>'
                for message in get_messages(request._request)
            )
            flashes = f'<ul class="messages">{items}</ul>' if items else ""

        body = "" if data is None else json.dumps(data, cls=JSONEncoder, indent=2)
        page = f"<!DOCTYPE html><html><body>{flashes}<pre>{escape(body)}</pre></body></html>"
        return page.encode(self.charset)


__all__ = ["PageRenderer"]
