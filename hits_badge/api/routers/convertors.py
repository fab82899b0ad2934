from __future__ import annotations

from starlette.convertors import Convertor, register_url_convertor

SLUG_PATTERN = "[A-Za-z0-9_.-]+"


class SlugConvertor(Convertor[str]):
    """Segmento user/repo. Lo que no encaja no matchea la ruta (404), no da 422."""

    regex = SLUG_PATTERN

    def convert(self, value: str) -> str:
        return value

    def to_string(self, value: str) -> str:
        return value


register_url_convertor("slug", SlugConvertor())
