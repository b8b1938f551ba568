import re

_CAMEL_BOUNDARY_RE = re.compile(r"(?<=[a-z0-9])(?=[A-Z])")


def snake_case(value: str) -> str:
    return _CAMEL_BOUNDARY_RE.sub("_", value).replace(" ", "_").lower()


def camel_case(value: str) -> str:
    head, *tail = value.split("_")
    return head + "".join(part.capitalize() for part in tail)
