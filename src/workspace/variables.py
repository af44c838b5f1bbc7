"""Variable substitution for rendered step text.

Placeholders look like {{key}}. Substitution happens in a single scan of
the original text, so a value that itself contains {{other}} is emitted
verbatim rather than expanded again. Unknown placeholders are left as-is.
"""

import re
from typing import Iterable, Optional, Union

from src.errors import ValidationError
from src.workspace.schemas import Variable

VARIABLE_KEY = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")


class VariableTable:
    """Ordered key/value table. Keys are unique; order is kept for display."""

    def __init__(self, variables: Optional[Iterable[Variable]] = None):
        self._values: dict[str, str] = {}
        for variable in variables or []:
            self.set(variable.key, variable.value)

    def set(self, key: str, value: str) -> Variable:
        if not VARIABLE_KEY.match(key or ""):
            raise ValidationError(
                f"Invalid variable key '{key}': use letters, digits and underscores, "
                f"not starting with a digit"
            )
        self._values[key] = value
        return Variable(key=key, value=value)

    def delete(self, key: str) -> bool:
        return self._values.pop(key, None) is not None

    def clear(self) -> None:
        self._values.clear()

    def get(self, key: str) -> Optional[str]:
        return self._values.get(key)

    def items(self) -> list[Variable]:
        return [Variable(key=k, value=v) for k, v in self._values.items()]

    def __contains__(self, key: str) -> bool:
        return key in self._values

    def __len__(self) -> int:
        return len(self._values)


def resolve_variables(
    text: str,
    variables: Union[VariableTable, Iterable[Variable]],
) -> str:
    """Replace every {{key}} in text with its value, without recursion."""
    if not isinstance(variables, VariableTable):
        variables = VariableTable(variables)
    if not len(variables) or "{{" not in text:
        return text

    keys = [v.key for v in variables.items()]
    pattern = re.compile(r"\{\{(" + "|".join(re.escape(k) for k in keys) + r")\}\}")
    return pattern.sub(lambda m: variables.get(m.group(1)), text)
