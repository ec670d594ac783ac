import enum


class Component(str, enum.Enum):
    """
    Deployable units of Apicurito, as selected by the pods' labels.

    The value is the label value; the label key is configured separately
    (usually ``component``), so the same components can be selected
    by different labels in different installation modes.
    """
    SERVICE = 'apicurito-service'
    UI = 'apicurito-ui'
    GENERATOR = 'apicurito-generator'

    def __str__(self) -> str:
        return self.name

    @classmethod
    def parse(cls, text: str) -> "Component":
        """ Accept either the member's name (case-insensitive) or the label value. """
        for component in cls:
            if text.upper() == component.name or text == component.value:
                return component
        choices = ', '.join(f"{c.name.lower()} ({c.value})" for c in cls)
        raise ValueError(f"Unknown component {text!r}; expected one of: {choices}.")
