"""Locate the App named by a ``module:attribute`` import string."""

import pkgutil

from roost.app import App


def resolve_app(import_string: str) -> App:
    """Import and return the roost App that *import_string* names.

    ``"pkg.module:name"`` looks up ``name``; a bare ``"pkg.module"``
    looks up ``app``. When the target is an app factory (any callable
    that is not itself an App) it is called with no arguments.

    Raises:
        ModuleNotFoundError: The module does not exist.
        AttributeError: The module has no such attribute.
        TypeError: The target (or the factory's result) is not an App.
    """
    if ":" not in import_string:
        import_string = f"{import_string}:app"

    target = pkgutil.resolve_name(import_string)
    if not isinstance(target, App) and callable(target):
        try:
            target = target()
        except Exception as exc:
            msg = f"App factory {import_string!r} failed: {exc}"
            raise TypeError(msg) from exc

    if not isinstance(target, App):
        msg = f"{import_string!r} resolved to {type(target).__name__}, not a roost.App instance"
        raise TypeError(msg)
    return target
