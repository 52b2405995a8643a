"""Registry of protected paths and the form each one expects."""

from __future__ import annotations

from typing import Dict, Optional, Pattern, Tuple

from starlette.routing import compile_path


class FormRegistry:
    """Maps path templates such as ``/items/{item_id}`` to form names."""

    def __init__(self) -> None:
        self._routes: Dict[str, Tuple[Pattern[str], str]] = {}

    def register(self, path: str, form_name: str) -> None:
        if not form_name:
            raise ValueError("form_name must be non-empty")
        existing = self._routes.get(path)
        if existing is not None and existing[1] != form_name:
            raise ValueError(f"path {path!r} is already bound to form {existing[1]!r}")
        regex, _, _ = compile_path(path)
        self._routes[path] = (regex, form_name)

    def match(self, path: str) -> Optional[str]:
        exact = self._routes.get(path)
        if exact is not None:
            return exact[1]
        for regex, form_name in self._routes.values():
            if regex.match(path):
                return form_name
        return None

    def all(self) -> Dict[str, str]:
        return {path: form_name for path, (_, form_name) in self._routes.items()}
