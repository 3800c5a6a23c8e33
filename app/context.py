"""
Request-scoped values that every log line carries.

RequestContextMiddleware binds the request fields and auth.py binds the
employee id once a session resolves. Values are strings; "" means unset.
"""

from contextvars import ContextVar

request_id_var: ContextVar[str] = ContextVar("request_id", default="")
http_method_var: ContextVar[str] = ContextVar("http_method", default="")
http_path_var: ContextVar[str] = ContextVar("http_path", default="")
employee_id_var: ContextVar[str] = ContextVar("employee_id", default="")

# Log field name -> var
_LOG_FIELDS: dict[str, ContextVar[str]] = {
    "request_id": request_id_var,
    "method": http_method_var,
    "path": http_path_var,
    "employee_id": employee_id_var,
}


def bind_request(request_id: str, method: str, path: str) -> None:
    request_id_var.set(request_id)
    http_method_var.set(method)
    http_path_var.set(path)


def get_context_dict() -> dict[str, str]:
    """R: Bound fields only, keyed by their log field name."""
    return {name: var.get() for name, var in _LOG_FIELDS.items() if var.get()}


def clear_context() -> None:
    for var in _LOG_FIELDS.values():
        var.set("")
