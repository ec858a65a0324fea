"""Custom exceptions for botapigen.

This module defines the hierarchy of exceptions raised while loading a bot API
specification and generating code from it. Every failure aborts the whole
generation run, so each class carries enough context to explain the first
problem encountered.
"""


class BotAPIGenError(Exception):
    """Base exception for all botapigen errors.

    Example:
        try:
            Generator(spec_text).generate()
        except BotAPIGenError as e:
            print(f"botapigen error: {e}")
    """

    def __init__(self, message: str, *args, **kwargs):
        self.message = message
        super().__init__(message, *args, **kwargs)


class SchemaError(BotAPIGenError):
    """Base exception for specification-related errors."""

    pass


class MalformedSchemaError(SchemaError):
    """The specification cannot be parsed into the data model.

    Attributes:
        path: Location inside the document (e.g. 'types.Message.fields[3]').
        reason: What is wrong at that location.
    """

    def __init__(self, reason: str, path: str | None = None):
        self.path = path
        self.reason = reason
        message = 'Malformed specification'
        if path:
            message += f" at '{path}'"
        message += f': {reason}'
        super().__init__(message)


class UnknownTypeError(SchemaError):
    """A type token references a name that is neither a scalar nor a declared type.

    Attributes:
        type_name: The unresolved name.
        path: Where the reference was found.
    """

    def __init__(self, type_name: str, path: str | None = None):
        self.type_name = type_name
        self.path = path
        message = f"Unknown type '{type_name}'"
        if path:
            message += f" referenced from '{path}'"
        super().__init__(message)


class SpecLoadError(SchemaError):
    """Failed to load a specification from a source.

    Attributes:
        source: The source path or URL that failed to load.
        cause: The underlying exception that caused the failure.
    """

    def __init__(self, source: str, cause: Exception | None = None):
        self.source = source
        self.cause = cause
        message = f"Failed to load specification from '{source}'"
        if cause:
            message += f': {cause}'
        super().__init__(message)


class NamingError(BotAPIGenError):
    """Base exception for identifier resolution errors."""

    pass


class ReservedCollisionError(NamingError):
    """Two distinct spec names resolve to the same Python identifier.

    Attributes:
        identifier: The identifier both names resolve to.
        names: The conflicting spec names, in the order they were seen.
        namespace: The namespace the collision happened in.
    """

    def __init__(self, identifier: str, names: tuple[str, str], namespace: str):
        self.identifier = identifier
        self.names = names
        self.namespace = namespace
        super().__init__(
            f"'{names[0]}' and '{names[1]}' both resolve to identifier "
            f"'{identifier}' in {namespace}"
        )


class GenerationError(BotAPIGenError):
    """Error during code generation.

    Attributes:
        context: Additional context about what was being generated.
        cause: The underlying exception that caused the failure.
    """

    def __init__(
        self, message: str, context: str | None = None, cause: Exception | None = None
    ):
        self.context = context
        self.cause = cause
        full_message = message
        if context:
            full_message = f'{message} (while generating {context})'
        if cause:
            full_message += f': {cause}'
        super().__init__(full_message)


class UnresolvedUnionError(GenerationError):
    """A union was looked up that type generation never registered.

    This signals that method generation ran before type generation, or that
    the specification is inconsistent.

    Attributes:
        key: The constituent type names of the missing union.
    """

    def __init__(self, key: tuple[str, ...], context: str | None = None):
        self.key = key
        super().__init__(
            f"Union of ({', '.join(key)}) was not registered during type generation",
            context=context,
        )


class TypeGenerationError(GenerationError):
    """Error generating a single type definition.

    Attributes:
        type_name: The spec name of the type being generated.
    """

    def __init__(self, type_name: str, cause: Exception | None = None):
        self.type_name = type_name
        super().__init__(
            f"Failed to generate type '{type_name}'", context=type_name, cause=cause
        )


class MethodGenerationError(GenerationError):
    """Error generating a single method binding.

    Attributes:
        method_name: The spec name of the method being generated.
    """

    def __init__(self, method_name: str, cause: Exception | None = None):
        self.method_name = method_name
        super().__init__(
            f"Failed to generate method '{method_name}'",
            context=method_name,
            cause=cause,
        )


class ConfigurationError(BotAPIGenError):
    """Error in configuration.

    Attributes:
        config_path: The path to the configuration file, if applicable.
        field: The specific configuration field that is invalid.
    """

    def __init__(
        self, message: str, config_path: str | None = None, field: str | None = None
    ):
        self.config_path = config_path
        self.field = field
        full_message = message
        if config_path:
            full_message = f"{message} in '{config_path}'"
        if field:
            full_message += f' (field: {field})'
        super().__init__(full_message)


class OutputError(BotAPIGenError):
    """Error writing generated output.

    Attributes:
        output_path: The path where output was being written.
        cause: The underlying exception that caused the failure.
    """

    def __init__(self, output_path: str, cause: Exception | None = None):
        self.output_path = output_path
        self.cause = cause
        message = f"Failed to write output to '{output_path}'"
        if cause:
            message += f': {cause}'
        super().__init__(message)
