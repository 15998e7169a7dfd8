"""Middleware base class.

Middleware is any object exposing some of the hook attributes listed in
``fusedb.hooks``. Subclassing ``Middleware`` is optional and adds no hooks:
the engine looks each hook up by name, so only the methods a subclass
actually defines take part in the chain.
"""


class Middleware:
    """Marker base for middleware.
    
    Define any of ``before_get``, ``before_set``, ``before_remove``,
    ``before_has``, ``after_get``, ``after_set``, ``after_remove``,
    ``after_has`` and ``on_error``. Hooks may be sync or async.
    """
    
    def __repr__(self) -> str:
        return f"{type(self).__name__}()"
