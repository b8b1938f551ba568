from .strings import camel_case, snake_case
