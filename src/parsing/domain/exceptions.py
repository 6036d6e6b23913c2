"""
Исключения для домена Parsing.

Разбор самого письма никогда не бросает исключений - только деградирует.
Исключения ниже сигнализируют о сломанной конфигурации (YAML, regex).
"""


class ParsingError(Exception):
    """Базовое исключение для ошибок домена Parsing."""

    def __init__(self, message: str, component: str = None, original_error: Exception = None):
        self.message = message
        self.component = component
        self.original_error = original_error
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        msg = f"Parsing Error: {self.message}"
        if self.component:
            msg += f" (Component: {self.component})"
        if self.original_error:
            msg += f" [Original: {type(self.original_error).__name__}: {str(self.original_error)}]"
        return msg


class ParsingConfigurationError(ParsingError):
    """Ошибка конфигурации домена Parsing (YAML, паттерны)."""
    pass


class PlatformConfigNotFoundError(ParsingConfigurationError):
    """Не найден YAML конфиг платформы или base.yaml."""
    pass


class InvalidPatternError(ParsingConfigurationError):
    """Паттерн в конфиге не компилируется или ссылается на несуществующую группу."""
    pass
