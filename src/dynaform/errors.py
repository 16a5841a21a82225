"""Exception definitions for dynaform"""


class DynaformException(Exception):
    """Base exception for all dynaform errors.

    All custom exceptions in dynaform inherit from this class. Field
    validation failures are not exceptions: they are returned as messages
    by the validator and collected by the form session.
    """

    pass


class SchemaException(DynaformException):
    """Raised when schema input cannot be turned into a form schema.

    Use this exception when:
    - The schema text is empty
    - The text is neither JSON, TOML, nor a readable object literal
    - The parsed value is not a mapping
    - The mapping declares a ``type`` other than ``"object"``
    - The ``properties`` mapping is missing or not a mapping
    - A field's ``pattern`` or ``x-required_if`` rule cannot be compiled
    """

    pass


class ConfigException(DynaformException):
    """Raised when settings loading or validation fails.

    Use this exception when:
    - The settings file cannot be found
    - The TOML syntax is invalid
    - Settings validation fails (invalid timezone, wrong value types)
    """

    pass
